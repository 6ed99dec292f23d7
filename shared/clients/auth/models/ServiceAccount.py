from pydantic import BaseModel, ConfigDict, field_validator


class ServiceAccountCredentials(BaseModel):
    """The subset of a Google service-account key file needed to mint tokens.

    Attributes:
        client_email:   Service-account email, used as the JWT issuer.
        private_key:    PEM-encoded RSA private key (PKCS#8).
        private_key_id: Key id, sent as the JWT "kid" header when present.
        project_id:     GCP project the service account belongs to.
    """

    model_config = ConfigDict(extra="ignore")

    client_email: str
    private_key: str
    private_key_id: str | None = None
    project_id: str | None = None

    @field_validator("client_email", "private_key")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value
