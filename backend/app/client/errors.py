class ApiError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class UnauthorizedError(ApiError):
    """The session is missing or expired; send the user to ``login_url``."""

    def __init__(self, detail: str, *, login_url: str) -> None:
        super().__init__(401, detail)
        self.login_url = login_url
