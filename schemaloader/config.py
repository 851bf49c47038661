"""Configuration management for the schema loader."""

import re
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


# SQLAlchemy URL prefixes per supported database type
_URL_SCHEMES = {
    "postgresql": "postgresql+psycopg2",
    "mysql": "mysql+pymysql",
    "sqlserver": "mssql+pyodbc",
    "oracle": "oracle+oracledb",
}

_DEFAULT_PORTS = {
    "postgresql": 5432,
    "mysql": 3306,
    "sqlserver": 1433,
    "oracle": 1521,
}


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    db_type: str = Field(default="postgresql", description="postgresql, mysql, sqlserver, sqlite, oracle or generic")
    url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL; overrides the fields below")
    host: str = Field(default="localhost", description="Database host")
    port: Optional[int] = Field(default=None, description="Database port")
    database: str = Field(default="", description="Database name, or file path for SQLite")
    user: str = Field(default="", description="Database user")
    password: str = Field(default="", description="Database password")

    class Config:
        env_prefix = "DB_"
        env_file = ".env"
        extra = "ignore"

    @property
    def connection_string(self) -> str:
        """Get SQLAlchemy connection string."""
        if self.url:
            return self.url

        db_type = self.db_type.lower()
        if db_type == "sqlite":
            return f"sqlite:///{self.database}" if self.database else "sqlite://"

        scheme = _URL_SCHEMES.get(db_type)
        if scheme is None:
            raise ValueError(f"Cannot build a URL for database type '{self.db_type}'; set url instead")

        port = self.port or _DEFAULT_PORTS[db_type]
        url = f"{scheme}://{self.user}:{self.password}@{self.host}:{port}/{self.database}"
        if db_type == "sqlserver":
            url += "?driver=ODBC+Driver+17+for+SQL+Server"
        return url


class LoaderConfig(BaseSettings):
    """Configuration for one catalog introspection run."""

    # Restrict introspection to one schema (empty = adapter default)
    schema_name: str = Field(default="", description="Schema to introspect")

    # Table filters; compiled when the config is validated
    table_include: re.Pattern = Field(
        default=re.compile(".*"),
        description="Only load tables matching this regex",
    )
    table_exclude: Optional[re.Pattern] = Field(
        default=None,
        description="Exclude tables matching this regex",
    )

    infer_relationships: bool = Field(
        default=True,
        description="Detect and declare belongs_to/has_many pairs",
    )
    qualify_monikers_with_schema: bool = Field(
        default=False,
        description="Prefix monikers (and registry keys) with the schema name",
    )
    inflection_overrides: dict[str, str] = Field(
        default_factory=dict,
        description="Exceptions to the pluralization of relation names",
    )

    # Capability tags, applied in this order around the core capability
    pre_core_capabilities: list[str] = Field(default_factory=list)
    vendor_capabilities_enabled: bool = Field(default=True)
    additional_capabilities: list[str] = Field(default_factory=list)
    post_core_capabilities: list[str] = Field(default_factory=list)

    debug_logging: bool = Field(
        default=False,
        description="Trace every generated declaration",
    )

    class Config:
        env_prefix = "LOADER_"
        extra = "ignore"

    @field_validator("table_include", mode="before")
    @classmethod
    def _default_include(cls, value):
        if value is None or value == "":
            return re.compile(".*")
        return value

    @field_validator("table_exclude", mode="before")
    @classmethod
    def _empty_exclude(cls, value):
        if value == "":
            return None
        return value

    @field_validator(
        "pre_core_capabilities",
        "additional_capabilities",
        "post_core_capabilities",
        mode="before",
    )
    @classmethod
    def _ensure_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class OutputConfig(BaseSettings):
    """Configuration for report output."""

    output_dir: Path = Field(
        default=Path("./output"),
        description="Directory for output files"
    )

    generate_markdown: bool = Field(default=True, description="Generate Markdown report")
    generate_json: bool = Field(default=False, description="Generate JSON registry dump")

    report_name: str = Field(default="schema_report.md")
    registry_json_name: str = Field(default="schema.json")

    class Config:
        env_prefix = "OUTPUT_"
        extra = "ignore"

    def ensure_output_dir(self):
        """Create output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


class AppConfig(BaseSettings):
    """Main application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    verbose: bool = Field(default=False, description="Verbose output")

    class Config:
        env_prefix = "APP_"
        extra = "ignore"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "AppConfig":
        """Load configuration from environment and .env file."""
        if env_file and Path(env_file).exists():
            from dotenv import load_dotenv
            load_dotenv(env_file)

        return cls(
            database=DatabaseConfig(),
            loader=LoaderConfig(),
            output=OutputConfig(),
        )

    @classmethod
    def from_args(
        cls,
        db_type: Optional[str] = None,
        url: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        output_dir: str = "./output",
        **kwargs
    ) -> "AppConfig":
        """Create configuration from command line arguments.

        Remaining keyword arguments are passed to LoaderConfig; None values
        are dropped so environment variables and defaults still apply.
        """
        db_kwargs = {}
        if db_type is not None: db_kwargs["db_type"] = db_type
        if url is not None: db_kwargs["url"] = url
        if host is not None: db_kwargs["host"] = host
        if port is not None: db_kwargs["port"] = port
        if database is not None: db_kwargs["database"] = database
        if user is not None: db_kwargs["user"] = user
        if password is not None: db_kwargs["password"] = password

        loader_kwargs = {k: v for k, v in kwargs.items() if v is not None}

        return cls(
            database=DatabaseConfig(**db_kwargs),
            loader=LoaderConfig(**loader_kwargs),
            output=OutputConfig(output_dir=Path(output_dir)),
        )
