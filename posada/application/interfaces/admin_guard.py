class AdminGuard:
    """Frontera de autorización administrativa. Emitir sesiones queda fuera."""

    def assert_admin_session(self, token: str | None) -> None:
        """
        Raises:
            AdminAuthorizationError: Si el token no corresponde a una sesión válida.
        """
        raise NotImplementedError

    def assert_delete_credential(self, password: str | None) -> None:
        """
        Raises:
            AdminAuthorizationError: (forbidden) si la credencial secundaria
                no está configurada o no coincide.
        """
        raise NotImplementedError
