import os
from pydantic import BaseModel


class Settings(BaseModel):
    api_key: str = os.getenv("API_KEY", "change-me")

    # External OCR provider (receives an image, returns raw text)
    ocr_api_base: str = os.getenv("OCR_API_BASE", "http://localhost:8003/v1")
    ocr_api_key: str | None = os.getenv("OCR_API_KEY")
    ocr_language: str = os.getenv("OCR_LANGUAGE", "eng+chi_sim")
    ocr_timeout_seconds: float = float(os.getenv("OCR_TIMEOUT_SECONDS", "60"))

    # Fit scoring policy
    prefer_larger_on_tie: bool = os.getenv("PREFER_LARGER_ON_TIE", "1") == "1"

    # JWT
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    jwt_audience: str | None = os.getenv("JWT_AUDIENCE")
    jwt_issuer: str | None = os.getenv("JWT_ISSUER")
    jwt_ttl_seconds: int = int(os.getenv("JWT_TTL_SECONDS", "3600"))

    # Rate limit (token bucket)
    rate_limit_per_min: int = int(os.getenv("RATE_LIMIT_PER_MIN", "60"))
    rate_limit_burst: int = int(os.getenv("RATE_LIMIT_BURST", "30"))

    # Cache TTL seconds (OCR text per image)
    cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "600"))


settings = Settings()
