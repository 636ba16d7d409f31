"""
Mail transport configuration schemas.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from otsnews.kernel.models.email_config import MailEncryption


class EmailConfigUpdate(BaseModel):
    """Transport settings. Leave password out to keep the stored one."""
    
    provider: str = Field("smtp", max_length=50)
    smtp_host: str = Field("", max_length=255)
    smtp_port: int = 587
    username: str = Field("", max_length=255)
    password: Optional[str] = Field(None, max_length=255)
    encryption: MailEncryption = MailEncryption.TLS
    from_address: str = Field("", max_length=255)
    from_name: str = Field("OTS NEWS", max_length=255)
    enabled: bool = False


class EmailConfigResponse(BaseModel):
    """Stored transport settings; the password is reported only as present or not."""
    
    provider: str
    smtp_host: str
    smtp_port: int
    username: str
    encryption: MailEncryption
    from_address: str
    from_name: str
    enabled: bool
    has_password: bool = False


class EmailTestRequest(BaseModel):
    to: EmailStr
