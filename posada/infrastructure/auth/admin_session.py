import hmac

from posada.application.interfaces.admin_guard import AdminGuard
from posada.domain.errors import AdminAuthorizationError


class SharedSecretAdminGuard(AdminGuard):
    """
    Valida la sesión administrativa contra un secreto compartido.

    La emisión del token (login) ocurre fuera de este servicio; aquí solo se
    compara en tiempo constante.
    """

    def __init__(self, session_secret: str | None, delete_credential: str | None) -> None:
        self._session_secret = session_secret
        self._delete_credential = delete_credential

    def assert_admin_session(self, token: str | None) -> None:
        if not self._session_secret or not token:
            raise AdminAuthorizationError()
        if not hmac.compare_digest(token.encode(), self._session_secret.encode()):
            raise AdminAuthorizationError()

    def assert_delete_credential(self, password: str | None) -> None:
        if not self._delete_credential:
            raise AdminAuthorizationError(
                "Credencial de eliminación no configurada", forbidden=True
            )
        if not password or not hmac.compare_digest(
            password.encode(), self._delete_credential.encode()
        ):
            raise AdminAuthorizationError("Contraseña de eliminación inválida", forbidden=True)
