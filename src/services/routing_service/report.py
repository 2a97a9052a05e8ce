"""
Sample helpdesk queries and human-readable route reports.
"""

from loguru import logger
from typing import Any, Iterable, List, Optional

from agents.schemas import RouteResult
from infrastructure.observability import build_run_config

SAMPLE_QUERIES = [
    "How do I request paid family leave?",
    "VPN keeps timing out when I try to load Salesforce dashboards.",
    "What approvals do I need for a vendor over $50k?",
]


def render_route_result(query: str, result: RouteResult) -> str:
    """Format one routed question the way the demo prints it."""
    classification = result.classification
    lines: List[str] = [
        "---",
        f"Query: {query}",
        "Ordered intents: " + " → ".join(str(i) for i in classification.ordered_intents),
        f"Confidence: {classification.confidence:.2f}",
        f"Reasoning: {classification.reasoning}",
    ]

    if not result.turns:
        lines.append("No specialized agent available for this request.")
        return "\n".join(lines)

    for turn in result.turns:
        response = turn.result
        lines.append("")
        lines.append(f"[{str(turn.intent_attempted).upper()} AGENT]")
        lines.append(response.text)
        lines.append("Sources: " + ", ".join(response.sources))
        if response.handoff:
            lines.append(
                f"Handoff requested → {response.handoff.intent} ({response.handoff.reason})"
            )

    if result.unresolved_intents:
        lines.append(
            "Unresolved intents: " + ", ".join(str(i) for i in result.unresolved_intents)
        )
    return "\n".join(lines)


def run_examples(
    router: Any,
    queries: Optional[Iterable[str]] = None,
    handler: Any = None,
) -> List[RouteResult]:
    """Route each query, print its report, and return the results."""
    results: List[RouteResult] = []
    for query in queries or SAMPLE_QUERIES:
        config = build_run_config(handler, metadata={"query_type": "sample"})
        result = router.route(query, config=config)
        print(render_route_result(query, result))
        logger.debug("Routed '{}' in {} turn(s)", query[:60], len(result.turns))
        results.append(result)
    return results
