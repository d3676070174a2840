import pytest

from training_quiz.core.catalog import TrainingCatalog, build_sample_catalog
from training_quiz.core.models import TrainingModule, TrainingResource
from training_quiz.core.quiz_importer import parse_quiz_text
from training_quiz.core.services.progress import TrainingProgressLedger


def test_marking_complete_is_idempotent(ledger):
    ledger.mark_complete("user1", "res6")
    ledger.mark_complete("user1", "res6")

    assert ledger.completed_resource_ids("user1") == ["res6"]
    assert ledger.is_resource_complete("user1", "res6")
    assert not ledger.is_resource_complete("user2", "res6")


def test_unknown_resource_is_rejected(ledger):
    with pytest.raises(LookupError):
        ledger.mark_complete("user1", "nope")


def test_module_and_overall_progress(ledger):
    ledger.mark_complete("user1", "res1")
    ledger.mark_complete("user1", "res6")

    assert ledger.module_progress("user1", "mod1") == pytest.approx(2 / 7 * 100)
    assert ledger.overall_progress("user1") == pytest.approx(2 / 7 * 100)
    assert ledger.module_progress("user1", "mod2") == 0.0
    assert not ledger.is_module_complete("user1", "mod1")


def test_certificate_after_every_resource_is_complete(ledger, catalog):
    for resource_id in catalog.get_module("mod1").resource_ids:
        ledger.mark_complete("user1", resource_id)

    assert ledger.module_progress("user1", "mod1") == pytest.approx(100.0)
    assert ledger.is_certificate_eligible("user1", "mod1")
    assert not ledger.is_certificate_eligible("user1", "mod2")


def test_initial_progress_is_copied(catalog):
    seed = {"user1": {"res1": "completed", "res2": "in_progress"}}
    ledger = TrainingProgressLedger(catalog, progress=seed)
    ledger.mark_complete("user1", "res3")

    assert ledger.completed_resource_ids("user1") == ["res1", "res3"]
    assert "res3" not in seed["user1"]
    assert ledger.snapshot("user1")["res2"] == "in_progress"


def test_catalog_rejects_duplicate_resource_ids():
    resource = TrainingResource("r1", "Dup", "article")
    with pytest.raises(ValueError):
        TrainingCatalog(
            [
                TrainingModule("m1", "One", resources=(resource,)),
                TrainingModule("m2", "Two", resources=(resource,)),
            ]
        )


def test_catalog_lookups(catalog):
    assert catalog.total_resource_count() == 7
    assert catalog.module_for_resource("res6").id == "mod1"
    assert catalog.module_for_resource("missing") is None
    with pytest.raises(LookupError):
        catalog.find_resource("missing")
    with pytest.raises(LookupError):
        catalog.get_module("missing")


def test_sample_catalog_accepts_replacement_assessment():
    quiz = parse_quiz_text("Q: Ready?\nA: Yes\nB: No\nCORRECT: A")

    resource = build_sample_catalog(quiz).find_resource("res6")

    assert resource.quiz is quiz
    assert resource.time_allowance_seconds() == 300
