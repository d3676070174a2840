"""Read-only lookup over training modules and their resources."""

from __future__ import annotations

from training_quiz.core.models import QuizContent, TrainingModule, TrainingResource
from training_quiz.core.quiz_importer import parse_quiz_text


class TrainingCatalog:
    """Resolves resources and their owning modules by id."""

    def __init__(self, modules: list[TrainingModule]) -> None:
        self._modules: list[TrainingModule] = list(modules)
        self._resources: dict[str, TrainingResource] = {}
        self._module_by_resource: dict[str, TrainingModule] = {}
        for module in self._modules:
            for resource in module.resources:
                if resource.id in self._resources:
                    raise ValueError(f"Duplicate resource id {resource.id!r} in catalog.")
                self._resources[resource.id] = resource
                self._module_by_resource[resource.id] = module

    def get_modules(self) -> list[TrainingModule]:
        return list(self._modules)

    def get_module(self, module_id: str) -> TrainingModule:
        for module in self._modules:
            if module.id == module_id:
                return module
        raise LookupError(f"Unknown module {module_id!r}")

    def find_resource(self, resource_id: str) -> TrainingResource:
        try:
            return self._resources[resource_id]
        except KeyError:
            raise LookupError(f"Unknown resource {resource_id!r}") from None

    def module_for_resource(self, resource_id: str) -> TrainingModule | None:
        return self._module_by_resource.get(resource_id)

    def total_resource_count(self) -> int:
        return len(self._resources)


_FINAL_ASSESSMENT_TEXT = """
Q: What is most effective closing technique for high-value clients?
A: Assumptive close
B: Summary close
C: Urgency close
D: Question close
CORRECT: B

Q: How should you handle price objections?
A: Immediately offer a discount
B: Reinforce value proposition
C: Compare with competitors
D: Ask about their budget
CORRECT: B

Q: What does the 'A' in the AIDA framework stand for?
A: Action
B: Attention
C: Acknowledgement
D: Analysis
CORRECT: B

Q: When reframing a conversation from price to value, what should you focus on?
A: Product features
B: Your company's history
C: Quantifiable ROI
D: Competitor weaknesses
CORRECT: C

Q: What is the primary goal of the 'Isolate the Objection' step?
A: To prove the prospect wrong
B: To end the conversation quickly
C: To confirm if price is the only barrier
D: To offer a discount immediately
CORRECT: C
"""


def build_sample_catalog(final_assessment: QuizContent | None = None) -> TrainingCatalog:
    """Catalog used by the desktop console and the API.

    ``final_assessment`` replaces the built-in questions of the module quiz.
    """
    if final_assessment is None:
        final_assessment = parse_quiz_text(_FINAL_ASSESSMENT_TEXT)
    selling = TrainingModule(
        id="mod1",
        title="Advanced Selling Techniques",
        category="Sales Skills",
        resources=(
            TrainingResource("res1", "Introduction to Advanced Selling", "article", "5 min read", "res-content-1"),
            TrainingResource("res2", "Sales Psychology Video", "video", "10 min video"),
            TrainingResource("res3", "Sales Playbook PDF", "pdf", "15 pages", "res-content-3"),
            TrainingResource("res4", "Sales Strategy Presentation", "presentation", "25 slides", "res-content-4"),
            TrainingResource("res5", "Sales Script Template", "word", "8 pages", "res-content-5"),
            TrainingResource(
                "res6",
                "Final Assessment Quiz",
                "quiz",
                "5 min quiz",
                final_assessment,
            ),
            TrainingResource("res7", "Mastering Consultative Selling", "article", "7 min read", "res-content-7"),
        ),
    )
    return TrainingCatalog(
        [
            selling,
            TrainingModule(id="mod2", title="Negotiation Mastery", category="Sales Skills"),
            TrainingModule(id="mod3", title="Product Suite Overview", category="Product Knowledge"),
            TrainingModule(id="mod4", title="New Hire Orientation", category="Onboarding"),
        ]
    )
