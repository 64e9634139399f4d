# app/api/routes.py
from __future__ import annotations

import logging
from typing import List, Optional

import requests
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from agents.analyzer_agent import analyze_html
from agents.extractor_agent import extract_components
from agents.fixer_agent import apply_fixes
from app.config import settings
from app.graph.lg_workflow import run_workflow
from models.analysis_models import SEOAnalysis
from models.component_models import ExtractedComponent
from models.site_models import PageMetadata
from services.crawler import PageTooLargeError, fetch_html
from services.html_parser import extract_metadata, prepare_safe_html

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request / Response モデル ---------


class HTMLRequest(BaseModel):
    html: str


class AnalyzeURLRequest(BaseModel):
    url: str


class FixRequest(BaseModel):
    html: str
    # 省略時はサーバ側で解析してから修正する
    analysis: Optional[SEOAnalysis] = None


class FixResponse(BaseModel):
    html: str
    before: SEOAnalysis
    after: SEOAnalysis


class PreviewRequest(BaseModel):
    html: str
    is_trusted: bool = False


class PreviewResponse(BaseModel):
    html: str


class AuditRequest(BaseModel):
    html: str
    auto_fix: bool = True


class AuditResponse(BaseModel):
    analysis: SEOAnalysis
    fixed_html: str
    fixed_analysis: SEOAnalysis
    components: List[ExtractedComponent] = []
    progress_messages: List[str] = []


def _check_size(html: str) -> None:
    """入力サイズの上限は呼び出し側（API）で制限する。"""
    if len(html) > settings.max_html_chars:
        logger.warning(
            "[api] html too large chars=%d limit=%d",
            len(html),
            settings.max_html_chars,
        )
        raise HTTPException(
            status_code=413,
            detail=f"HTML is too large ({len(html)} chars, limit {settings.max_html_chars}).",
        )


# --------- エンドポイント ---------


@router.post("/seo/analyze", response_model=SEOAnalysis)
def api_analyze(payload: HTMLRequest) -> SEOAnalysis:
    """HTML を解析して SEO スコアと問題一覧を返す。"""
    _check_size(payload.html)
    logger.info("[api.analyze] html_chars=%d", len(payload.html))
    return analyze_html(payload.html)


@router.post("/seo/fix", response_model=FixResponse)
def api_fix(payload: FixRequest) -> FixResponse:
    """
    自動修正を適用した HTML と、修正前後の解析結果を返す。
    """
    _check_size(payload.html)

    before = payload.analysis or analyze_html(payload.html)
    fixed_html = apply_fixes(payload.html, before)
    after = analyze_html(fixed_html)

    logger.info(
        "[api.fix] fixable=%d score %d -> %d",
        before.fixable_count,
        before.score,
        after.score,
    )
    return FixResponse(html=fixed_html, before=before, after=after)


@router.post("/seo/analyze-url", response_model=SEOAnalysis)
def api_analyze_url(payload: AnalyzeURLRequest) -> SEOAnalysis:
    """公開済みページ（http / https のみ）を取得して解析する。"""
    logger.info("[api.analyze-url] url=%s", payload.url)
    try:
        html = fetch_html(payload.url)
    except ValueError as e:
        logger.warning("[api.analyze-url] rejected url=%s error=%s", payload.url, e)
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PageTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e)) from e
    except requests.RequestException as e:
        logger.warning("[api.analyze-url] fetch failed url=%s error=%s", payload.url, e)
        raise HTTPException(status_code=502, detail=f"Failed to fetch {payload.url}") from e

    _check_size(html)
    return analyze_html(html)


@router.post("/components/extract", response_model=List[ExtractedComponent])
def api_extract(payload: HTMLRequest) -> List[ExtractedComponent]:
    """HTML をコンポーネント単位に分解する。"""
    _check_size(payload.html)
    components = extract_components(payload.html)
    logger.info("[api.extract] components=%d", len(components))
    return components


@router.post("/metadata", response_model=PageMetadata)
def api_metadata(payload: HTMLRequest) -> PageMetadata:
    _check_size(payload.html)
    return extract_metadata(payload.html)


@router.post("/preview", response_model=PreviewResponse)
def api_preview(payload: PreviewRequest) -> PreviewResponse:
    _check_size(payload.html)
    return PreviewResponse(html=prepare_safe_html(payload.html, payload.is_trusted))


@router.post("/audit", response_model=AuditResponse)
def api_audit(payload: AuditRequest) -> AuditResponse:
    """
    解析 → 自動修正 → 再解析 → コンポーネント抽出をまとめて実行する。
    """
    _check_size(payload.html)
    logger.info(
        "[api.audit] start html_chars=%d auto_fix=%s",
        len(payload.html),
        payload.auto_fix,
    )

    state = run_workflow(html=payload.html, auto_fix=payload.auto_fix)

    logger.info("[api.audit] done nodes=%s", state.get("current_node"))

    return AuditResponse(
        analysis=state["analysis"],
        fixed_html=state["fixed_html"],
        fixed_analysis=state["fixed_analysis"],
        components=state.get("components", []),
        progress_messages=state.get("progress_messages", []),
    )
