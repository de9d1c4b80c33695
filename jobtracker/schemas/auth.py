from jobtracker.schemas.job import CamelModel


class LoginRequest(CamelModel):
    user_id: str
    password: str


class LoginResponse(CamelModel):
    success: bool
    message: str
