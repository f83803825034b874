from pydantic import AliasGenerator, BaseModel, ConfigDict, StrictStr
from pydantic.alias_generators import to_camel


class AuthResponse(BaseModel):
    """Body of a successful POST /auth/login or /auth/register"""

    access_token: StrictStr
    email: StrictStr
    user_id: str | int | None = None
    first_name: str | None = None
    last_name: str | None = None

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
    )


class AuthPageResponse(BaseModel):
    """Context for the login / register form renderer"""

    page: str
    next: str | None = None
