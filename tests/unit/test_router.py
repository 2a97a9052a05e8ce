"""Tests for MultiAgentRouter dispatch, handoffs and turn budget."""

import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agents.departments import DEPARTMENT_PROFILES
from agents.domain_agent import DomainRagAgent
from agents.errors import ClassificationError, ConfigurationError, GenerationError
from agents.prompts.agent_prompts import NO_PRIOR_RESPONSES
from agents.router import MultiAgentRouter, build_directive
from agents.schemas import DepartmentIntent, DispatchDecision, Handoff, QueueItem

from tests.conftest import RecordingLLM, ScriptedAgent, ScriptedClassifier, StaticRetriever

HR = DepartmentIntent.HR
TECH = DepartmentIntent.TECH
FINANCE = DepartmentIntent.FINANCE
UNKNOWN = DepartmentIntent.UNKNOWN


def _department_agents(overrides=None):
    agents = {
        HR: ScriptedAgent("HR Agent"),
        TECH: ScriptedAgent("Tech Agent"),
        FINANCE: ScriptedAgent("Finance Agent"),
    }
    agents.update(overrides or {})
    return agents


def _chain(names, budget=5):
    """Agents where each one hands off to the next name in *names*."""
    agents = {}
    for current, nxt in zip(names, list(names[1:]) + [None]):
        handoff = Handoff(intent=nxt, reason=f"{current} needs {nxt}") if nxt else None
        agents[current] = ScriptedAgent(f"Agent {current}", handoff=handoff)
    return MultiAgentRouter(ScriptedClassifier([names[0]]), agents, turn_budget=budget), agents


class TestBuildDirective:

    def test_without_note_returns_question(self):
        assert build_directive("Where is my payslip?") == "Where is my payslip?"

    def test_with_note_appends_directive(self):
        assert build_directive("Q?", "needs budget sign-off") == (
            "Q?\n\nFollow-up directive: needs budget sign-off"
        )


class TestRouteBasics:

    def test_single_department(self):
        agents = _department_agents()
        router = MultiAgentRouter(ScriptedClassifier([HR]), agents)

        result = router.route("How do I request paid family leave?")

        assert result.intents_attempted == (HR,)
        assert result.unresolved_intents == ()
        call = agents[HR].calls[0]
        assert call["task"] == "How do I request paid family leave?"
        assert call["history"] == NO_PRIOR_RESPONSES
        assert agents[TECH].calls == []

    def test_classification_is_returned(self):
        classifier = ScriptedClassifier([TECH], confidence=0.42, reasoning="vpn issue only")
        result = MultiAgentRouter(classifier, _department_agents()).route("VPN is down")

        assert result.classification.confidence == 0.42
        assert result.classification.reasoning == "vpn issue only"
        assert classifier.calls[0]["question"] == "VPN is down"

    def test_unknown_only_produces_no_turns(self):
        agents = _department_agents()
        result = MultiAgentRouter(ScriptedClassifier([UNKNOWN]), agents).route("Lunch menu?")

        assert result.turns == ()
        assert result.unresolved_intents == ()
        assert result.decisions == ((QueueItem(intent=UNKNOWN), DispatchDecision.SKIP_UNKNOWN),)
        assert all(not agent.calls for agent in agents.values())

    def test_unknown_among_departments_is_skipped(self):
        router = MultiAgentRouter(ScriptedClassifier([UNKNOWN, FINANCE]), _department_agents())

        result = router.route("Vendor approvals?")

        assert result.intents_attempted == (FINANCE,)

    def test_duplicate_classifier_intents_dispatch_once(self):
        agents = _department_agents()
        router = MultiAgentRouter(ScriptedClassifier([HR, HR, TECH]), agents)

        result = router.route("Leave and laptop")

        assert result.intents_attempted == (HR, TECH)
        assert len(agents[HR].calls) == 1

    def test_missing_agent_is_skipped(self):
        agents = _department_agents()
        del agents[FINANCE]
        router = MultiAgentRouter(ScriptedClassifier([FINANCE, HR]), agents)

        result = router.route("Budget and leave")

        assert result.intents_attempted == (HR,)
        assert result.decisions[0] == (QueueItem(intent=FINANCE), DispatchDecision.SKIP_NO_AGENT)


class TestHandoffs:

    def test_handoff_runs_after_classified_intents(self):
        agents = _department_agents(
            {
                HR: ScriptedAgent(
                    "HR Agent",
                    text="Leave is approved by your manager.",
                    handoff=Handoff(
                        intent=FINANCE,
                        reason="budget impact",
                        context="needs budget sign-off",
                    ),
                ),
                TECH: ScriptedAgent("Tech Agent", text="Laptop ships in 3 days."),
            }
        )
        question = "New hire needs leave and a laptop"
        router = MultiAgentRouter(ScriptedClassifier([HR, TECH]), agents)

        result = router.route(question)

        assert result.intents_attempted == (HR, TECH, FINANCE)
        finance_call = agents[FINANCE].calls[0]
        assert finance_call["task"] == (
            f"{question}\n\nFollow-up directive: needs budget sign-off"
        )
        assert finance_call["history"] == (
            "HR Agent:\nLeave is approved by your manager."
            "\n\nTech Agent:\nLaptop ships in 3 days."
        )
        assert agents[TECH].calls[0]["task"] == question

    def test_reason_is_used_without_context(self):
        agents = _department_agents(
            {HR: ScriptedAgent("HR Agent", handoff=Handoff(intent=TECH, reason="laptop setup"))}
        )
        MultiAgentRouter(ScriptedClassifier([HR]), agents).route("Onboarding")

        assert agents[TECH].calls[0]["task"].endswith("Follow-up directive: laptop setup")

    def test_handoff_to_unknown_is_ignored(self):
        agents = _department_agents(
            {HR: ScriptedAgent("HR Agent", handoff=Handoff(intent=UNKNOWN, reason="unclear"))}
        )
        result = MultiAgentRouter(ScriptedClassifier([HR]), agents).route("Leave?")

        assert result.intents_attempted == (HR,)
        assert len(result.decisions) == 1

    def test_handoff_to_visited_department_is_ignored(self):
        agents = {
            "a": ScriptedAgent("Agent a", handoff=Handoff(intent="b", reason="loop")),
            "b": ScriptedAgent("Agent b", handoff=Handoff(intent="a", reason="loop")),
        }
        router = MultiAgentRouter(ScriptedClassifier(["a"]), agents)

        result = router.route("ping pong")

        assert result.intents_attempted == ("a", "b")
        assert result.unresolved_intents == ()

    def test_handoff_to_queued_department_is_skipped_as_duplicate(self):
        agents = _department_agents(
            {HR: ScriptedAgent("HR Agent", handoff=Handoff(intent=TECH, reason="laptop"))}
        )
        result = MultiAgentRouter(ScriptedClassifier([HR, TECH]), agents).route("Onboarding")

        assert result.intents_attempted == (HR, TECH)
        # The classifier's item runs first, so the tech agent gets no directive.
        assert agents[TECH].calls[0]["task"] == "Onboarding"
        assert [d for _, d in result.decisions] == [
            DispatchDecision.DISPATCH,
            DispatchDecision.DISPATCH,
            DispatchDecision.SKIP_DUPLICATE,
        ]


class TestTurnBudget:

    def test_long_chain_stops_at_budget(self):
        names = ["d1", "d2", "d3", "d4", "d5", "d6"]
        router, agents = _chain(names, budget=5)

        result = router.route("Escalate everywhere")

        assert result.intents_attempted == ("d1", "d2", "d3", "d4", "d5")
        assert result.unresolved_intents == ("d6",)
        assert agents["d6"].calls == []

    def test_custom_budget(self):
        router, _ = _chain(["a", "b", "c"], budget=2)

        result = router.route("Short budget")

        assert len(result.turns) == 2
        assert result.unresolved_intents == ("c",)

    def test_skips_do_not_spend_turns(self):
        agents = {"a": ScriptedAgent("Agent a")}
        classifier = ScriptedClassifier([UNKNOWN, "missing", "a"])
        router = MultiAgentRouter(classifier, agents, turn_budget=1)

        result = router.route("Only a counts")

        assert result.intents_attempted == ("a",)

    def test_default_budget_comes_from_config(self):
        from infrastructure.config import MAX_AGENT_TURNS

        router = MultiAgentRouter(ScriptedClassifier([HR]), _department_agents())
        assert router.turn_budget == MAX_AGENT_TURNS


@pytest.mark.parametrize(
    "graph, seeds",
    [
        ({"a": "b", "b": "c", "c": "a"}, ["a"]),
        ({"a": "a"}, ["a"]),
        ({"a": "c", "b": "c", "c": None}, ["a", "b"]),
        ({"a": "b", "b": "a", "c": "a"}, ["c", "b"]),
    ],
)
def test_no_department_runs_twice(graph, seeds):
    agents = {
        name: ScriptedAgent(
            f"Agent {name}",
            handoff=Handoff(intent=target, reason="next") if target else None,
        )
        for name, target in graph.items()
    }
    result = MultiAgentRouter(ScriptedClassifier(seeds), agents).route("q")

    attempted = result.intents_attempted
    assert len(attempted) == len(set(attempted))
    assert len(attempted) <= 5
    assert not set(result.unresolved_intents) & set(attempted)


class TestRunContextAndErrors:

    def test_config_is_threaded_to_classifier_and_agents(self):
        config = {"tags": ["test-run"]}
        classifier = ScriptedClassifier([HR, TECH])
        agents = _department_agents()

        MultiAgentRouter(classifier, agents).route("Leave and laptop", config=config)

        assert classifier.calls[0]["config"] is config
        assert agents[HR].calls[0]["config"] is config
        assert agents[TECH].calls[0]["config"] is config

    def test_classifier_error_propagates(self):
        classifier = ScriptedClassifier([HR], error=ClassificationError("bad json"))
        agents = _department_agents()

        with pytest.raises(ClassificationError):
            MultiAgentRouter(classifier, agents).route("Leave?")
        assert agents[HR].calls == []

    def test_agent_error_aborts_route(self):
        agents = _department_agents(
            {HR: ScriptedAgent("HR Agent", error=GenerationError("llm down"))}
        )
        router = MultiAgentRouter(ScriptedClassifier([HR, TECH]), agents)

        with pytest.raises(GenerationError, match="llm down"):
            router.route("Leave and laptop")
        assert agents[TECH].calls == []

    def test_router_instance_is_reusable(self):
        router = MultiAgentRouter(ScriptedClassifier([HR]), _department_agents())

        first = router.route("one")
        second = router.route("two")

        assert first.intents_attempted == second.intents_attempted == (HR,)


class TestConstruction:

    def test_rejects_zero_budget(self):
        with pytest.raises(ConfigurationError):
            MultiAgentRouter(ScriptedClassifier([HR]), _department_agents(), turn_budget=0)

    def test_rejects_agent_bound_to_unknown(self):
        agents = _department_agents({UNKNOWN: ScriptedAgent("Fallback")})
        with pytest.raises(ConfigurationError):
            MultiAgentRouter(ScriptedClassifier([HR]), agents)

    def test_rejects_agent_without_invoke(self):
        with pytest.raises(ConfigurationError):
            MultiAgentRouter(ScriptedClassifier([HR]), {HR: object()})

    def test_agent_map_is_read_only(self):
        router = MultiAgentRouter(ScriptedClassifier([HR]), _department_agents())
        with pytest.raises(TypeError):
            router.agents[UNKNOWN] = ScriptedAgent("x")


class TestHistory:

    def test_empty_history_uses_sentinel(self):
        router = MultiAgentRouter(ScriptedClassifier([HR]), _department_agents())
        assert router.build_history([]) == NO_PRIOR_RESPONSES

    def test_agent_label_falls_back_to_intent(self):
        router = MultiAgentRouter(ScriptedClassifier([HR]), {})
        assert router.agent_label(FINANCE) == "finance"


class TestUnresolvedIntents:

    def test_duplicates_and_unknown_are_reported_as_queued(self):
        agents = {
            "a": ScriptedAgent("Agent a", handoff=Handoff(intent="b", reason="needs b")),
            "b": ScriptedAgent("Agent b"),
        }
        classifier = ScriptedClassifier(["a", UNKNOWN, "b"])

        result = MultiAgentRouter(classifier, agents, turn_budget=1).route("q")

        assert result.intents_attempted == ("a",)
        assert result.unresolved_intents == (UNKNOWN, "b", "b")


class TestWithDomainAgents:

    def test_route_through_rag_agents(self, hr_docs):
        hr_reply = json.dumps(
            {
                "answer": "Paid family leave is 12 weeks; file it in Workday.",
                "citations": [],
                "follow_up": {
                    "intent": "finance",
                    "reason": "Backfill cost",
                    "context_package": "needs budget sign-off",
                },
            }
        )
        finance_reply = json.dumps(
            {"answer": "Backfill over $10k needs VP approval.", "citations": ["FIN-APR-2"]}
        )
        finance_llm = RecordingLLM(reply=finance_reply)
        agents = {
            HR: DomainRagAgent(
                FakeListChatModel(responses=[hr_reply]),
                StaticRetriever(hr_docs),
                DEPARTMENT_PROFILES[HR],
            ),
            FINANCE: DomainRagAgent(
                finance_llm,
                StaticRetriever([]),
                DEPARTMENT_PROFILES[FINANCE],
            ),
        }
        question = "How do I request paid family leave?"

        result = MultiAgentRouter(ScriptedClassifier([HR]), agents).route(question)

        assert result.intents_attempted == (HR, FINANCE)
        hr_turn, finance_turn = result.turns
        assert hr_turn.result.sources == ("hr_docs/leave_policy.md", "chunk-1")
        assert hr_turn.result.handoff.note == "needs budget sign-off"
        assert finance_turn.result.sources == ("FIN-APR-2",)

        user = finance_llm.calls[0]["messages"][1]["content"]
        assert "Follow-up directive: needs budget sign-off" in user
        assert "HR Knowledge Specialist:\nPaid family leave is 12 weeks" in user
