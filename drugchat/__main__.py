"""API 서버 실행: python -m drugchat 또는 drugchat."""

import uvicorn

from drugchat.config import settings


def main():
    uvicorn.run(
        "drugchat.server:app",
        host=settings.host,
        port=settings.port,
        # 로그 설정은 server lifespan의 setup_logging이 맡는다
        log_config=None,
    )


if __name__ == "__main__":
    main()
