# =============================================================================
# lib/scoring.py - Schema-Match Scorer
# =============================================================================
# Grades a predicted Spec against the ground-truth Spec. Field names are
# compared case-insensitively. Three independent scores:
#
#   - Field-set precision/recall/F1
#   - Type-match rate over predicted fields that exist in the truth
#   - Unit-match rate over those fields whose truth declares a unit
#
# Empty denominators score 0.
# =============================================================================

import logging

from core.models import PredictedSpec, PredictionScore, SchemaMatch, SpecDoc

# Set up logging for this module
logger = logging.getLogger(__name__)

SpecLike = SpecDoc | PredictedSpec


def _truth_map(truth: SpecLike) -> dict:
    """Lower-cased name -> field. The last declaration of a name wins."""
    return {f.name.lower(): f for f in truth.fields}


def compare_field_sets(truth: SpecLike, predicted: SpecLike) -> SchemaMatch:
    """Precision/recall/F1 of the predicted field-name set."""
    truth_names = {f.name.lower() for f in truth.fields}
    predicted_names = {f.name.lower() for f in predicted.fields}

    tp = len(truth_names & predicted_names)
    precision = tp / len(predicted_names) if predicted_names else 0.0
    recall = tp / len(truth_names) if truth_names else 0.0
    f1 = (
        (2 * precision * recall) / (precision + recall)
        if precision + recall
        else 0.0
    )
    return SchemaMatch(precision=precision, recall=recall, f1=f1)


def type_match_rate(truth: SpecLike, predicted: SpecLike) -> float:
    """Share of overlapping predicted fields whose type equals the truth type."""
    truth_fields = _truth_map(truth)
    total = ok = 0
    for f in predicted.fields:
        t = truth_fields.get(f.name.lower())
        if t is None:
            continue
        total += 1
        ok += int(t.type == f.type)
    return ok / total if total else 0.0


def unit_match_rate(truth: SpecLike, predicted: SpecLike) -> float:
    """
    Share of overlapping predicted fields whose unit equals the truth unit.

    Only fields whose truth declares a unit are scored; the rest are left out
    of the denominator rather than counted as misses.
    """
    truth_fields = _truth_map(truth)
    total = ok = 0
    for f in predicted.fields:
        t = truth_fields.get(f.name.lower())
        if t is None or t.unit is None:
            continue
        total += 1
        ok += int(f.unit == t.unit)
    return ok / total if total else 0.0


def score_prediction(truth: SpecDoc, predicted: SpecLike) -> PredictionScore:
    """All three scores for one trial."""
    match = compare_field_sets(truth, predicted)
    score = PredictionScore(
        precision=match.precision,
        recall=match.recall,
        f1=match.f1,
        type_acc=type_match_rate(truth, predicted),
        unit_acc=unit_match_rate(truth, predicted),
    )
    logger.debug(
        f"Scored prediction against '{truth.name}': f1={score.f1:.3f}, "
        f"type_acc={score.type_acc:.3f}, unit_acc={score.unit_acc:.3f}"
    )
    return score
