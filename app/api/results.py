# app/api/results.py
# Сохранение и просмотр результатов викторин.
import json
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError
from app.core.security import Identity, get_current_identity, require_admin
from app.db.session import get_db
from app.models.course import Subject
from app.models.result import QuizResult
from app.schemas.result import ResultIn, ResultOut

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_answers(answers):
    # Клиенты иногда шлют answers строкой с JSON
    if isinstance(answers, str):
        try:
            answers = json.loads(answers)
        except json.JSONDecodeError:
            raise ValidationError("answers must be valid JSON")
    if answers is None:
        raise ValidationError("answers is required")
    return answers


def percentage(score: int, total: int) -> int:
    """Процент с округлением .5 вверх: 1/8 -> 13."""
    return (200 * score + total) // (2 * total)


@router.post("/results", status_code=status.HTTP_201_CREATED)
def save_result(
    payload: ResultIn,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Результат сохраняется для владельца токена."""
    if payload.subject_id is None:
        raise ValidationError("subject_id is required")
    if not payload.subject_name:
        raise ValidationError("subject_name is required")
    if payload.score is None or payload.total is None:
        raise ValidationError("score and total are required")
    if payload.answers is None:
        raise ValidationError("answers is required")
    if payload.total <= 0 or payload.score < 0 or payload.score > payload.total:
        raise ValidationError("score must be between 0 and total, total must be positive")
    if db.get(Subject, payload.subject_id) is None:
        raise NotFound("Subject not found")

    result = QuizResult(
        user_id=identity.id,
        subject_id=payload.subject_id,
        subject_name=payload.subject_name,
        score=payload.score,
        total=payload.total,
        percentage=percentage(payload.score, payload.total),
        answers=_parse_answers(payload.answers),
    )
    db.add(result)
    db.commit()
    db.refresh(result)
    logger.info(f"✅ Quiz result saved: id={result.id} user={identity.id} {result.percentage}%")
    return {"message": "Result saved", "result": ResultOut.model_validate(result)}


@router.get("/results/me")
def my_results(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    results = (
        db.query(QuizResult)
        .filter(QuizResult.user_id == identity.id)
        .order_by(QuizResult.created_at.desc(), QuizResult.id.desc())
        .all()
    )
    return {"results": [ResultOut.model_validate(r) for r in results]}


@router.get("/admin/results")
def all_results(admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    results = db.query(QuizResult).order_by(QuizResult.created_at.desc(), QuizResult.id.desc()).all()
    return {"results": [ResultOut.model_validate(r) for r in results]}
