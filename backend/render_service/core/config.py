import os

class Settings:
    PROJECT_NAME: str = "Render Server"

    # listen address; PORT may be a number or a socket path, kept as a string
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: str = os.getenv("PORT", "3002")
    KEEP_ALIVE_SECONDS: int = int(os.getenv("KEEP_ALIVE_SECONDS", "120"))

    # storage paths
    TEMP_DIR: str = os.getenv("TEMP_DIR", os.path.join(os.getcwd(), "temp"))

    # job settings
    MAX_BODY_BYTES: int = int(os.getenv("MAX_BODY_BYTES", str(100 * 1024 * 1024)))  # 100mb
    JOB_TTL_SECONDS: int = int(os.getenv("JOB_TTL_SECONDS", "1800"))
    CLEANUP_INTERVAL_SECONDS: int = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "1800"))
    RENDER_WORKERS: int = int(os.getenv("RENDER_WORKERS", "4"))
    RENDER_TIMEOUT_SECONDS: int = int(os.getenv("RENDER_TIMEOUT_SECONDS", "900"))

    # logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
