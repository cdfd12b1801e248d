"""
LangGraph StateGraph definition for the claim workflow.

Flow (strictly linear, one node at a time):
  parser_agent → verifier_agent → coder_agent → submission_agent → reviewer_agent → END

The graph is compiled once at import. Each run passes its LLM client as
config={"configurable": {"llm": client}}.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from agents.coder_agent import coder_agent
from agents.parser_agent import parser_agent
from agents.reviewer_agent import reviewer_agent
from agents.submission_agent import submission_agent
from agents.verifier_agent import verifier_agent
from llm.client import CompletionClient
from orchestrator.state import ClaimState

STEP_ORDER: tuple[str, ...] = (
    "parser_agent",
    "verifier_agent",
    "coder_agent",
    "submission_agent",
    "reviewer_agent",
)


def run_config(llm: CompletionClient) -> RunnableConfig:
    return {"configurable": {"llm": llm}}


def _with_llm(
    node: Callable[[ClaimState, CompletionClient], Awaitable[ClaimState]],
) -> Callable[[ClaimState, RunnableConfig], Awaitable[ClaimState]]:
    """Feed the run's LLM client (from the configurable section) to a node that needs one."""

    async def _run(state: ClaimState, config: RunnableConfig) -> ClaimState:
        llm = (config.get("configurable") or {}).get("llm")
        if llm is None:
            raise RuntimeError(f"{node.__name__}: no LLM client in config['configurable']['llm']")
        return await node(state, llm)

    _run.__name__ = node.__name__
    return _run


def build_graph() -> StateGraph:
    """Build the (uncompiled) workflow graph."""
    workflow = StateGraph(ClaimState)

    # ---- nodes -------------------------------------------------------
    workflow.add_node("parser_agent",     _with_llm(parser_agent))
    workflow.add_node("verifier_agent",   _with_llm(verifier_agent))
    workflow.add_node("coder_agent",      _with_llm(coder_agent))
    workflow.add_node("submission_agent", submission_agent)
    workflow.add_node("reviewer_agent",   _with_llm(reviewer_agent))

    # ---- entry point -------------------------------------------------
    workflow.set_entry_point(STEP_ORDER[0])

    # ---- linear edges ------------------------------------------------
    for current, following in zip(STEP_ORDER, STEP_ORDER[1:]):
        workflow.add_edge(current, following)
    workflow.add_edge(STEP_ORDER[-1], END)

    return workflow


# Compiled graph, shared by every run
graph = build_graph().compile()
