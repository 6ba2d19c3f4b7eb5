import os


class Settings:
    PROJECT_NAME: str = "prepgames"
    DEBUG: bool = False
    LOG_DIR: str = os.environ.get("PREPGAMES_LOG_DIR", "log")
    LOG_FILE: str = "prepgames.log"
    DATABASE_URL: str = os.environ.get("PREPGAMES_DATABASE_URL", "sqlite:///prepgames.db")
    CONTENT_URL: str = os.environ.get("PREPGAMES_CONTENT_URL", "http://localhost:3001")
    HTTP_TIMEOUT: float = float(os.environ.get("PREPGAMES_HTTP_TIMEOUT", "10"))
    CONNECTION_POOL_LIMIT: int = 40
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
