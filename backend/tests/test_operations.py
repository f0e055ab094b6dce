"""
Tests for the concept operations with a scripted LLM.

Every test drives the operation through the real prompt -> extraction ->
normalization -> validation pipeline; only the gateway call is faked.
"""
import pytest

from errors import ExtractionError, GatewayError, InputValidationError, OutputValidationError
from models import Concept, ExtendedConcept
from operations import (
    derive_parents,
    derive_summary,
    expand,
    expand_list,
    explore,
    progressive_expand,
    refocus,
    synthesize,
    trace_path,
    validate_links,
)
from operations.explore import DIVERSITY_TEMPERATURES
from operations.progressive_expand import next_layer_number
from services_concept_validation import validate_concept
from services_llm import TASK_EXPAND, TASK_EXPLORE
from services_concept_graph import build_hierarchy
from services_merge import merge_into_graph


def _names(concepts):
    return [c.name for c in concepts]


# ---------------------------------------------------------------------------
# expand
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_expand_links_children_to_input(fake_llm, machine_learning):
    fake_llm.reply_with(
        '```json\n['
        '{"name": "Supervised Learning", "description": "Learning from labels", "parents": [], "children": ["x"]},'
        '{"name": "Clustering", "description": "Grouping"}'
        ']\n```'
    )

    results = await expand(machine_learning)

    assert _names(results) == ["Supervised Learning", "Clustering"]
    for concept in results:
        assert "Machine Learning" in concept.parents
        assert concept.children == []
        assert validate_concept(concept)

    request = fake_llm.last_request
    assert request.task_type == TASK_EXPAND
    assert "Machine Learning" in request.user_prompt
    # Existing children are listed so the model does not regenerate them
    assert "Supervised Learning" in request.user_prompt


@pytest.mark.asyncio
async def test_expand_does_not_duplicate_existing_parent(fake_llm, machine_learning):
    fake_llm.reply_with([{"name": "Regression", "description": "", "parents": ["Machine Learning"], "children": []}])

    results = await expand(machine_learning)

    assert results[0].parents == ["Machine Learning"]


@pytest.mark.asyncio
async def test_expand_accepts_plain_dict_and_leaves_it_untouched(fake_llm, sample_concept_data):
    fake_llm.reply_with([{"name": "Eigenvalues"}])
    before = {**sample_concept_data, "parents": list(sample_concept_data["parents"])}

    results = await expand(sample_concept_data)

    assert results[0].parents == ["Linear Algebra"]
    assert sample_concept_data == before


@pytest.mark.asyncio
async def test_expand_rejects_invalid_input_before_calling_llm(fake_llm):
    with pytest.raises(InputValidationError) as exc_info:
        await expand({"name": "", "description": "", "parents": [], "children": []})

    assert str(exc_info.value) == "Invalid concept input for expand operation"
    assert fake_llm.requests == []


@pytest.mark.asyncio
async def test_expand_invalid_generated_concept(fake_llm, machine_learning):
    fake_llm.reply_with('[{"name": "Good"}, {"description": "nameless"}]')

    with pytest.raises(OutputValidationError) as exc_info:
        await expand(machine_learning)

    assert exc_info.value.operation == "expand"
    assert exc_info.value.concept_name == "unknown"


@pytest.mark.asyncio
async def test_expand_non_object_item_is_output_error(fake_llm, machine_learning):
    fake_llm.reply_with('["just a string"]')

    with pytest.raises(OutputValidationError):
        await expand(machine_learning)


@pytest.mark.asyncio
async def test_expand_unparseable_reply(fake_llm, machine_learning):
    fake_llm.reply_with("Sorry, I can't do that.")

    with pytest.raises(ExtractionError):
        await expand(machine_learning)


@pytest.mark.asyncio
async def test_expand_propagates_gateway_error(fake_llm, machine_learning):
    fake_llm.reply_with(GatewayError("LLM API call failed: timeout"))

    with pytest.raises(GatewayError):
        await expand(machine_learning)


@pytest.mark.asyncio
async def test_expand_empty_reply_is_empty_result(fake_llm, machine_learning):
    fake_llm.reply_with("[]")
    assert await expand(machine_learning) == []


# ---------------------------------------------------------------------------
# expand_list / synthesize
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_expand_list_anchors_unparented_results(fake_llm):
    parents = [Concept(name="Probability"), Concept(name="Statistics")]
    fake_llm.reply_with([
        {"name": "Bayesian Inference", "parents": ["Probability", "Statistics"]},
        {"name": "Sampling", "parents": ["Something Else"]},
        {"name": "Estimators"},
    ])

    results = await expand_list(parents)

    assert results[0].parents == ["Probability", "Statistics"]
    assert results[1].parents == ["Something Else", "Probability"]
    assert results[2].parents == ["Probability"]
    for concept in results:
        assert any(p in ("Probability", "Statistics") for p in concept.parents)


@pytest.mark.asyncio
async def test_expand_list_requires_non_empty_list(fake_llm):
    with pytest.raises(InputValidationError):
        await expand_list([])
    with pytest.raises(InputValidationError):
        await expand_list([{"name": "Probability"}])
    assert fake_llm.requests == []


@pytest.mark.asyncio
async def test_synthesize_results_have_every_input_as_parent(fake_llm):
    parents = [Concept(name="Biology"), Concept(name="Computer Science"), Concept(name="Chemistry")]
    fake_llm.reply_with([
        {"name": "Bioinformatics", "parents": ["Biology"]},
        {"name": "Computational Chemistry", "parents": ["Quantum Physics"]},
    ])

    results = await synthesize(parents)

    assert results[0].parents == ["Biology", "Computer Science", "Chemistry"]
    assert results[1].parents == ["Quantum Physics", "Biology", "Computer Science", "Chemistry"]


# ---------------------------------------------------------------------------
# derive_parents
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_derive_parents_links_input_as_child(fake_llm, machine_learning):
    fake_llm.reply_with([
        {"name": "Statistics", "children": []},
        {"name": "Linear Algebra", "children": ["Machine Learning", "Graphics"]},
    ])

    results = await derive_parents(machine_learning)

    assert results[0].children == ["Machine Learning"]
    assert results[1].children == ["Machine Learning", "Graphics"]


# ---------------------------------------------------------------------------
# explore
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_explore_returns_siblings_and_parent_updates(fake_llm):
    concept = Concept(name="Neural Networks", parents=["Machine Learning", "Neuroscience"])
    fake_llm.reply_with([
        {"name": "Decision Trees", "parents": ["Ignored"]},
        {"name": "Support Vector Machines"},
    ])

    results = await explore(concept)

    siblings, updates = results[:2], results[2:]
    assert _names(siblings) == ["Decision Trees", "Support Vector Machines"]
    for sibling in siblings:
        assert sibling.parents == ["Machine Learning", "Neuroscience"]

    assert _names(updates) == ["Machine Learning", "Neuroscience"]
    for update in updates:
        assert update.description == ""
        assert update.parents == []
        assert update.children == ["Neural Networks", "Decision Trees", "Support Vector Machines"]


@pytest.mark.asyncio
async def test_explore_merge_does_not_wipe_parent_description(fake_llm):
    parent = Concept(name="Machine Learning", description="keep me", children=["Neural Networks"])
    concept = Concept(name="Neural Networks", parents=["Machine Learning"])
    fake_llm.reply_with([{"name": "Decision Trees"}])

    graph = merge_into_graph({"Machine Learning": parent, "Neural Networks": concept}, await explore(concept))

    assert graph["Machine Learning"].description == "keep me"
    assert graph["Machine Learning"].children == ["Neural Networks", "Decision Trees"]
    assert graph["Decision Trees"].parents == ["Machine Learning"]


@pytest.mark.asyncio
async def test_explore_without_parents_has_no_updates(fake_llm):
    fake_llm.reply_with([{"name": "B"}, {"name": "C"}])

    results = await explore(Concept(name="A"), diversity="low")

    assert _names(results) == ["B", "C"]
    assert all(c.parents == [] for c in results)


@pytest.mark.asyncio
@pytest.mark.parametrize("diversity", ["low", "medium", "high"])
async def test_explore_diversity_sets_temperature(fake_llm, diversity):
    fake_llm.reply_with("[]")

    await explore(Concept(name="A"), diversity=diversity)

    request = fake_llm.last_request
    assert request.task_type == TASK_EXPLORE
    assert request.temperature == DIVERSITY_TEMPERATURES[diversity]
    assert diversity in request.user_prompt


def test_diversity_temperatures_increase():
    assert DIVERSITY_TEMPERATURES["low"] < DIVERSITY_TEMPERATURES["medium"] < DIVERSITY_TEMPERATURES["high"]


@pytest.mark.asyncio
async def test_explore_rejects_unknown_diversity(fake_llm):
    with pytest.raises(InputValidationError):
        await explore(Concept(name="A"), diversity="extreme")
    assert fake_llm.requests == []


# ---------------------------------------------------------------------------
# refocus
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_refocus_scores_and_preserves_omitted_fields(fake_llm):
    concepts = [
        Concept(name="Calculus", description="Rates of change", parents=["Math"], children=["Limits"], layer=2),
        Concept(name="Topology", description="Shapes", parents=["Math"]),
    ]
    fake_llm.reply_with([
        {"name": "Calculus", "attention_score": 0.9, "importance": "high"},
        {"name": "Topology", "attention_score": 1.4, "importance": "urgent", "parents": ["Geometry"]},
    ])

    results = await refocus(concepts, "learn machine learning")

    calculus, topology = results
    assert isinstance(calculus, ExtendedConcept)
    assert calculus.description == "Rates of change"
    assert calculus.parents == ["Math"]
    assert calculus.children == ["Limits"]
    assert calculus.layer == 2
    assert calculus.attention_score == 0.9
    assert calculus.importance == "high"

    assert topology.parents == ["Math", "Geometry"]
    assert topology.attention_score == 1.0
    assert topology.importance is None

    assert "learn machine learning" in fake_llm.last_request.user_prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("goal", ["", "   ", None])
async def test_refocus_requires_goal(fake_llm, goal):
    with pytest.raises(InputValidationError) as exc_info:
        await refocus([Concept(name="Calculus")], goal)
    assert str(exc_info.value) == "Goal is required for refocus operation"
    assert fake_llm.requests == []


# ---------------------------------------------------------------------------
# validate_links
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_validate_links_can_remove_parents(fake_llm):
    concepts = [
        Concept(name="Backpropagation", description="Gradient computation", parents=["Calculus", "Poetry"]),
        Concept(name="Calculus", description="Math", children=["Backpropagation"]),
    ]
    fake_llm.reply_with([
        {"name": "Backpropagation", "validation_score": 0.4, "parents": ["Calculus"]},
        {"name": "Calculus", "validation_score": 2},
    ])

    results = await validate_links(concepts)

    backprop, calculus = results
    assert backprop.parents == ["Calculus"]
    assert backprop.description == "Gradient computation"
    assert backprop.validation_score == 0.4

    assert calculus.children == ["Backpropagation"]
    assert calculus.validation_score == 1.0


@pytest.mark.asyncio
async def test_validate_links_unknown_name_is_kept_as_returned(fake_llm):
    fake_llm.reply_with([{"name": "New Thing", "parents": ["X"]}])

    results = await validate_links([Concept(name="A")])

    assert results[0].name == "New Thing"
    assert results[0].parents == ["X"]
    assert results[0].validation_score is None


# ---------------------------------------------------------------------------
# trace_path
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_trace_path_chains_steps_and_ends_at_target(fake_llm):
    start = Concept(name="Arithmetic")
    end = Concept(name="Calculus", description="Rates of change")
    fake_llm.reply_with([{"name": "Algebra"}, {"name": "Functions"}])

    path = await trace_path(start, end)

    assert _names(path) == ["Algebra", "Functions", "Calculus"]
    assert path[0].parents == ["Arithmetic"]
    assert path[1].parents == ["Algebra"]
    assert path[2].parents == ["Functions"]
    assert path[2].description == "Rates of change"


@pytest.mark.asyncio
async def test_trace_path_strips_start_and_stops_at_end(fake_llm):
    start = Concept(name="Arithmetic")
    end = Concept(name="Calculus")
    fake_llm.reply_with([
        {"name": "Arithmetic"},
        {"name": "Algebra"},
        {"name": "Calculus"},
        {"name": "Differential Equations"},
    ])

    path = await trace_path(start, end)

    assert _names(path) == ["Algebra", "Calculus"]
    assert path[1].parents == ["Algebra"]


@pytest.mark.asyncio
async def test_trace_path_with_empty_reply_links_end_to_start(fake_llm):
    fake_llm.reply_with("[]")

    path = await trace_path(Concept(name="A"), Concept(name="B"))

    assert _names(path) == ["B"]
    assert path[0].parents == ["A"]


@pytest.mark.asyncio
async def test_trace_path_same_concept_skips_llm(fake_llm):
    path = await trace_path(Concept(name="A"), {"name": "A", "description": "", "parents": [], "children": []})

    assert _names(path) == ["A"]
    assert fake_llm.requests == []


@pytest.mark.asyncio
async def test_trace_path_invalid_end(fake_llm):
    with pytest.raises(InputValidationError) as exc_info:
        await trace_path(Concept(name="A"), {"name": "B"})
    assert "end concept" in str(exc_info.value)


# ---------------------------------------------------------------------------
# derive_summary
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_derive_summary_limits_and_filters_parents(fake_llm):
    layer = [Concept(name="Addition"), Concept(name="Subtraction"), Concept(name="Multiplication")]
    fake_llm.reply_with([
        {"name": "Arithmetic Operations", "parents": ["Addition", "Division"], "children": ["x"]},
        {"name": "Number Sense", "parents": ["Unrelated"]},
        {"name": "Third Summary"},
    ])

    results = await derive_summary(layer)

    assert _names(results) == ["Arithmetic Operations", "Number Sense"]
    assert results[0].parents == ["Addition"]
    assert results[0].children == []
    assert results[1].parents == ["Addition", "Subtraction", "Multiplication"]


# ---------------------------------------------------------------------------
# progressive_expand
# ---------------------------------------------------------------------------

def test_next_layer_number():
    assert next_layer_number([]) == 1
    assert next_layer_number([Concept(name="A", layer=1), Concept(name="B", layer=3)]) == 4
    assert next_layer_number([Concept(name="A")]) == 1


@pytest.mark.asyncio
async def test_progressive_expand_first_layer(fake_llm):
    fake_llm.reply_with([{"name": "Data"}, {"name": "Algorithms", "layer": 7}])

    results = await progressive_expand(Concept(name="Machine Learning"), [])

    assert _names(results) == ["Data", "Algorithms"]
    assert all(c.layer == 1 for c in results)
    assert all(c.parents == [] for c in results)
    assert "first layer" in fake_llm.last_request.user_prompt


@pytest.mark.asyncio
async def test_progressive_expand_next_layer_links_to_previous(fake_llm):
    previous = [
        Concept(name="Data", description="Raw observations", layer=1),
        Concept(name="Algorithms", description="Procedures", layer=1, children=["Sorting"]),
    ]
    fake_llm.reply_with([
        {"name": "Supervised Learning", "parents": ["Data", "Algorithms"]},
        {"name": "Feature Engineering", "parents": []},
    ])

    results = await progressive_expand(Concept(name="Machine Learning"), previous)

    new_concepts = [c for c in results if c.layer == 2]
    updated = {c.name: c for c in results if c.layer == 1}

    assert _names(new_concepts) == ["Supervised Learning", "Feature Engineering"]
    assert new_concepts[1].parents == ["Data"]
    assert updated["Data"].children == ["Supervised Learning", "Feature Engineering"]
    assert updated["Algorithms"].children == ["Sorting", "Supervised Learning"]
    assert "Raw observations" in fake_llm.last_request.user_prompt

    # inputs are not mutated
    assert previous[0].children == []


# ---------------------------------------------------------------------------
# logging
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_operations_record_events(fake_llm, event_log_dir, machine_learning):
    from services_logging import get_recent_events

    fake_llm.reply_with([{"name": "Regression"}], "no json here")

    await expand(machine_learning)
    with pytest.raises(ExtractionError):
        await expand(machine_learning)

    events = get_recent_events()
    statuses = sorted(e["status"] for e in events)
    assert statuses == ["error", "ok"]
    ok = next(e for e in events if e["status"] == "ok")
    assert ok["operation"] == "expand"
    assert ok["input_names"] == ["Machine Learning"]
    assert ok["result_names"] == ["Regression"]
    error = next(e for e in events if e["status"] == "error")
    assert error["error"].startswith("ExtractionError")


@pytest.mark.asyncio
async def test_operation_events_carry_scalar_arguments(fake_llm, event_log_dir):
    from services_logging import get_recent_events

    fake_llm.reply_with([{"name": "B"}], [{"name": "A", "attention_score": 0.5}])

    await explore(Concept(name="A"), diversity="low")
    await refocus([Concept(name="A")], "pass the exam")

    events = {e["operation"]: e for e in get_recent_events()}
    assert events["explore"]["metadata"] == {"diversity": "low"}
    assert events["refocus"]["metadata"] == {"goal": "pass the exam"}


# ---------------------------------------------------------------------------
# result contracts
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_expand_cats_yields_kittens(fake_llm):
    fake_llm.reply_with('[{"name":"Kittens","description":"baby cats"}]')

    results = await expand({"name": "Cats", "parents": [], "children": [], "description": "felines"})

    assert [c.model_dump(exclude_none=True) for c in results] == [
        {"name": "Kittens", "description": "baby cats", "parents": ["Cats"], "children": []}
    ]


@pytest.mark.asyncio
async def test_progressive_expand_layer_follows_highest_previous_layer(fake_llm):
    previous = [Concept(name="A", layer=2), Concept(name="B", layer=3)]
    fake_llm.reply_with([{"name": "C", "parents": ["B"]}, {"name": "D", "layer": 1}])

    results = await progressive_expand(Concept(name="Topic"), previous)

    new_concepts = [c for c in results if c.name in ("C", "D")]
    assert [c.layer for c in new_concepts] == [4, 4]


@pytest.mark.asyncio
async def test_explore_skips_blank_parent_names(fake_llm):
    fake_llm.reply_with([{"name": "Sib"}])

    results = await explore({"name": "X", "description": "", "parents": ["", "P"], "children": []})

    assert _names(results) == ["Sib", "P"]
    assert all(validate_concept(c) for c in results)
    assert "" not in merge_into_graph({}, results)


@pytest.mark.asyncio
async def test_explore_drops_input_and_its_parents_as_siblings(fake_llm):
    concept = Concept(name="Neural Networks", parents=["Machine Learning"])
    fake_llm.reply_with([
        {"name": "Neural Networks"},
        {"name": "Machine Learning"},
        {"name": "Decision Trees"},
    ])

    results = await explore(concept)

    assert _names(results) == ["Decision Trees", "Machine Learning"]
    update = results[1]
    assert update.children == ["Neural Networks", "Decision Trees"]
    assert build_hierarchy(merge_into_graph({"Neural Networks": concept}, results))
