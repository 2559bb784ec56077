"""Scoring layer — deterministic, explainable scorers.

Each scorer is a small class with immutable rule tables injected at
construction, plus a module-level convenience function bound to the
default tables.
"""

from jobmarket_scoring.scoring.alerts import Alert, SmartAlertGenerator, generate_alerts
from jobmarket_scoring.scoring.proof_tasks import ProofTaskScorer, score_proof_task
from jobmarket_scoring.scoring.relevance import RelevanceScore, RelevanceScorer, calculate_relevance
from jobmarket_scoring.scoring.salary import SalaryFairnessAnalyzer, SalaryInsight, analyze_salary
from jobmarket_scoring.scoring.skills import SkillExtractor, extract_skills
from jobmarket_scoring.scoring.trust import TrustScoreEngine, TrustStatus, derive_verification_status

__all__ = [
    "Alert",
    "ProofTaskScorer",
    "RelevanceScore",
    "RelevanceScorer",
    "SalaryFairnessAnalyzer",
    "SalaryInsight",
    "SkillExtractor",
    "SmartAlertGenerator",
    "TrustScoreEngine",
    "TrustStatus",
    "analyze_salary",
    "calculate_relevance",
    "derive_verification_status",
    "extract_skills",
    "generate_alerts",
    "score_proof_task",
]
