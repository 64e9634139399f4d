# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List

from app.graph.lg_state import GraphState
from agents.analyzer_agent import analyze_html
from agents.fixer_agent import apply_fixes
from agents.extractor_agent import extract_components

from models.analysis_models import SEOAnalysis
from models.component_models import ExtractedComponent

logger = logging.getLogger(__name__)


def _log_progress(state: GraphState, node: str, message: str) -> GraphState:
    """
    LangGraph 用の進捗ログを state に積むユーティリティ。
    state は dict (GraphState) として扱う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- Analyzer ノード ----------


def analyzer_node(state: GraphState) -> GraphState:
    """
    Analyzer ノード:
    元の HTML を解析して SEOAnalysis を state に詰める。
    """
    state = _log_progress(state, "analyzer", "start: analyzing html")

    analysis: SEOAnalysis = analyze_html(state["html"])
    state["analysis"] = analysis

    state = _log_progress(
        state,
        "analyzer",
        f"done: score={analysis.score} issues={len(analysis.issues)} fixable={analysis.fixable_count}",
    )
    return state


# ---------- Fixer ノード ----------


def fixer_node(state: GraphState) -> GraphState:
    """
    Fixer ノード:
    analysis の fix を適用した HTML を fixed_html に入れる。
    auto_fix=False のときは元の HTML をそのまま使う。
    """
    if not state.get("auto_fix", True):
        state["fixed_html"] = state["html"]
        return _log_progress(state, "fixer", "skipped: auto_fix disabled")

    state = _log_progress(state, "fixer", "start: applying fixes")

    analysis: SEOAnalysis = state["analysis"]
    state["fixed_html"] = apply_fixes(state["html"], analysis)

    state = _log_progress(state, "fixer", f"done: {analysis.fixable_count} fixable issue(s) processed")
    return state


# ---------- Re-Analyzer ノード ----------


def reanalyzer_node(state: GraphState) -> GraphState:
    """
    修正後の HTML をもう一度解析し、fixed_analysis に入れる。
    修正していない場合は元の解析結果を使い回す。
    """
    if not state.get("auto_fix", True):
        state["fixed_analysis"] = state["analysis"]
        return _log_progress(state, "reanalyzer", "skipped: auto_fix disabled")

    state = _log_progress(state, "reanalyzer", "start: analyzing fixed html")

    fixed: SEOAnalysis = analyze_html(state["fixed_html"])
    state["fixed_analysis"] = fixed

    before: SEOAnalysis = state["analysis"]
    state = _log_progress(
        state,
        "reanalyzer",
        f"done: score {before.score} -> {fixed.score}",
    )
    return state


# ---------- Extractor ノード ----------


def extractor_node(state: GraphState) -> GraphState:
    """
    Extractor ノード:
    （修正済みの）HTML からコンポーネントを切り出す。
    """
    state = _log_progress(state, "extractor", "start: extracting components")

    source_html = state.get("fixed_html") or state["html"]
    components: List[ExtractedComponent] = extract_components(source_html)
    state["components"] = components

    state = _log_progress(state, "extractor", f"done: {len(components)} component(s)")
    return state
