import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    app_id: str = os.getenv("APP_ID", "default-app-id")
    data_dir: str = os.getenv("DATA_DIR", os.path.join(os.getcwd(), "data"))
    cleanup_interval_hours: float = float(os.getenv("CLEANUP_INTERVAL_HOURS", "24"))
    check_interval_minutes: int = int(os.getenv("CHECK_INTERVAL_MINUTES", "60"))
    extractor: str = os.getenv("EXTRACTOR", "openai").lower()
    render_scale: float = float(os.getenv("RENDER_SCALE", "1.5"))


settings = Settings()
