# app/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    解析・修正・抽出の本体は純粋関数なので、ここは API / クローラ用の設定だけ。
    """

    # ---------- API ----------
    app_title: str = "HTML Page Auditor"

    # LOG_LEVEL=DEBUG にするとスキップした検査もログに出る
    log_level: str = "INFO"

    # 1 リクエストで受け付ける HTML の最大文字数（超えたら 413）
    max_html_chars: int = 2_000_000

    # ---------- Crawler ----------
    fetch_timeout: float = 10.0
    user_agent: str = "html-page-auditor/0.1 (+dev)"

    # 取得するページ本文の最大バイト数（超えたら途中で打ち切って 413）
    max_fetch_bytes: int = 8_000_000

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
