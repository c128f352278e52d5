from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "tendermatch"
    db_username: str = "tendermatch"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    files_root: str = "/app/files"

    max_upload_bytes: int = 10 * 1024 * 1024
    max_page_count: int = 100
    accepted_mime_type: str = "application/pdf"

    job_poll_interval_seconds: int = 2
    job_timeout_seconds: int = 300
    profile_apply_attempts: int = 3

    ocr_engine: str = "llmwhisperer"
    ocr_timeout_seconds: int = 150
    llmwhisperer_base_url: str = "https://llmwhisperer-api.us-central.unstract.com/api/v2"
    llmwhisperer_api_key: str = ""
    llmwhisperer_mode: str = "form"
    llmwhisperer_output_mode: str = "layout_preserving"
    llmwhisperer_poll_interval_seconds: float = 6.0
    llmwhisperer_max_polls: int = 20

    pdf_engine: str = "pdfplumber"

    analysis_provider: str = "openai"
    analysis_timeout_seconds: int = 60
    keyword_max_count: int = 15

    analysis_openai_api_key: str = ""
    analysis_openai_model_name: str = "gpt-4o"
    analysis_openai_timeout_seconds: int = 30
    analysis_openai_temperature: float = 0.2

    analysis_openai_compatible_base_url: str = ""
    analysis_openai_compatible_api_key: str = ""
    analysis_openai_compatible_model_name: str = ""
    analysis_openai_compatible_timeout_seconds: int = 30

    analysis_openrouter_api_key: str = ""
    analysis_openrouter_model_name: str = ""
    analysis_openrouter_timeout_seconds: int = 30

    analysis_groq_api_key: str = ""
    analysis_groq_model_name: str = ""
    analysis_groq_timeout_seconds: int = 30

    analysis_together_api_key: str = ""
    analysis_together_model_name: str = ""
    analysis_together_timeout_seconds: int = 30

    analysis_deepseek_api_key: str = ""
    analysis_deepseek_model_name: str = ""
    analysis_deepseek_timeout_seconds: int = 30

    analysis_ollama_api_key: str = "ollama"
    analysis_ollama_model_name: str = ""
    analysis_ollama_timeout_seconds: int = 60

    match_default_limit: int = 20
    match_max_limit: int = 100
    match_fallback_score_ceiling: float = 25.0

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_cors_origins: list[str] = ["http://localhost:5173"]
