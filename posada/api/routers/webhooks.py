from fastapi import APIRouter, Depends, Request, status

from posada.api.dependencies import get_use_cases

router = APIRouter()


@router.post("/webhooks/stripe", status_code=status.HTTP_200_OK)
async def stripe_webhook(
    request: Request,
    use_cases=Depends(get_use_cases),
) -> dict:
    # El cuerpo debe llegar intacto: la firma se calcula sobre los bytes crudos
    raw_body = await request.body()
    signature = request.headers.get("Stripe-Signature")
    await use_cases["handle_webhook"].execute(raw_body=raw_body, signature=signature)
    return {"received": True}
