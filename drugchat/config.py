from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Ollama
    ollama_base_url: str = "http://localhost:11434"
    llm_model: str = "llama3.1:8b"
    embed_model: str = "nomic-embed-text"
    embed_dim: int = 768
    embed_timeout: float = 30.0
    generate_timeout: float = 60.0
    temperature: float = 0.7
    max_output_tokens: int = 1024

    # PostgreSQL
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "drugchat"
    db_password: str = "drugchat"
    db_name: str = "drugchat_db"
    db_connect_timeout: int = 5
    db_statement_timeout_ms: int = 10000

    # Chat
    retriever_top_k: int = 3
    max_query_chars: int = 2000
    # None이면 classifier.DRUG_KEYWORDS 사용. 환경 변수에서는 JSON 배열로 지정한다.
    drug_keywords: list[str] | None = None

    # 생성 재시도
    generation_max_attempts: int = 3
    generation_initial_delay: float = 1.0
    request_timeout: float = 60.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    model_config = {"env_prefix": "DRUGCHAT_"}

    @property
    def database_url(self) -> str:
        return (
            f"host={self.db_host} port={self.db_port} "
            f"dbname={self.db_name} user={self.db_user} password={self.db_password}"
        )


settings = Settings()
