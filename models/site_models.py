# models/site_models.py

from __future__ import annotations

from pydantic import BaseModel


class PageMetadata(BaseModel):
    """
    ライブラリ一覧などで使う、1ページ分の簡易メタ情報。
    - title: <title> のテキスト（無ければ "Untitled Document"）
    - description: meta description（無ければ空文字）
    - favicon: アイコンの href（無ければ空文字）
    """

    title: str = "Untitled Document"
    description: str = ""
    favicon: str = ""
