"""
Pydantic schemas for sync agent configuration with validation
"""

from pydantic import BaseModel, Field, validator
from typing import Dict, Optional
from sqlalchemy.engine import URL, make_url
from models.mapping import DBMap


class DatabaseConfig(BaseModel):
    """
    Connection settings for one database.
    
    Ensures:
    - Driver and database name are present
    - Port is a valid TCP port
    """
    
    driver: str = Field("mysql+aiomysql", min_length=1)
    host: Optional[str] = None
    port: Optional[int] = Field(None, gt=0, lt=65536)
    database: str = Field(..., min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None
    
    # Extra driver options, rendered as the URL query string
    options: Dict[str, str] = Field(default_factory=dict)
    
    @validator("driver", "database")
    def strip_value(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Value cannot be empty after stripping")
        return v
    
    class Config:
        frozen = True
    
    @classmethod
    def from_url(cls, url: str) -> "DatabaseConfig":
        """Build a config from a SQLAlchemy URL string"""
        parsed = make_url(url)
        return cls(
            driver=parsed.drivername,
            host=parsed.host,
            port=parsed.port,
            database=parsed.database or "",
            username=parsed.username,
            password=parsed.password,
            options={
                key: value if isinstance(value, str) else ",".join(value)
                for key, value in parsed.query.items()
            }
        )
    
    def to_url(self) -> URL:
        return URL.create(
            drivername=self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query=self.options
        )
    
    def render_url(self) -> str:
        """URL string including the password, for engine creation"""
        return self.to_url().render_as_string(hide_password=False)
    
    def describe(self) -> str:
        """Loggable location without credentials"""
        location = f"{self.host}:{self.port}" if self.host else "local"
        return f"{self.driver}://{location}/{self.database}"


class AgentConfig(BaseModel):
    """Everything a sync agent needs, validated once at construction"""
    
    source: DatabaseConfig
    destination: DatabaseConfig
    db_map: DBMap
    sync_interval: int = Field(30, gt=0)
    
    class Config:
        frozen = True
