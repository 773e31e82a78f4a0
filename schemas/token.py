from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """JWT token payload schema issued by the sign-in front end"""
    sub: str = Field(..., description="User ID (subject)")
    email: str | None = Field(None, description="Signed-in user's e-mail")
    name: str | None = Field(None, description="Display name")
    exp: int = Field(..., description="Token expiration timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sub": "109876543210",
                "email": "ada@example.com",
                "name": "Ada",
                "exp": 1234567890,
            }
        }
    )

    @property
    def user_id(self) -> str:
        """Owner key for timeline entries (e-mail when the provider supplies one)"""
        return self.email or self.sub
