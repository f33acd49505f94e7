# app/api/courses.py
# Каталог: предметы, классы, курсы и вопросы.
# Чтение — для авторизованных (список предметов публичный), запись — только admin.
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError
from app.core.security import Identity, get_current_identity, require_admin
from app.db.session import get_db
from app.models.course import Course, Question, SchoolClass, Subject, UserSubject
from app.schemas.course import (
    ClassIn,
    ClassOut,
    CourseIn,
    CourseOut,
    QuestionIn,
    QuestionOut,
    SubjectIn,
    SubjectOut,
)

router = APIRouter()


def _get_or_404(db: Session, model, obj_id: int, message: str):
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFound(message)
    return obj


def _required(value, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return value.strip()


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# ---------------- SUBJECTS ----------------

@router.get("/subjects")
def list_subjects(db: Session = Depends(get_db)):
    subjects = db.query(Subject).order_by(Subject.id).all()
    return {"subjects": [SubjectOut.model_validate(s) for s in subjects]}


@router.get("/admin/subjects")
def admin_list_subjects(admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    subjects = db.query(Subject).order_by(Subject.id).all()
    return {"subjects": [SubjectOut.model_validate(s) for s in subjects]}


@router.post("/admin/subjects", status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectIn, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    subject = _save(db, Subject(name=_required(payload.name, "Subject name is required")))
    return {"message": "Subject created", "subject": SubjectOut.model_validate(subject)}


@router.get("/my-subjects")
def my_subjects(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Предметы, привязанные к текущему пользователю."""
    subjects = (
        db.query(Subject)
        .join(UserSubject, UserSubject.subject_id == Subject.id)
        .filter(UserSubject.user_id == identity.id)
        .order_by(Subject.id)
        .all()
    )
    return {"subjects": [SubjectOut.model_validate(s) for s in subjects]}


# ---------------- QUESTIONS ----------------

@router.get("/subjects/{subject_id}/questions")
def list_questions(subject_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    _get_or_404(db, Subject, subject_id, "Subject not found")
    questions = db.query(Question).filter(Question.subject_id == subject_id).order_by(Question.id).all()
    return {"questions": [QuestionOut.model_validate(q) for q in questions]}


@router.get("/admin/subjects/{subject_id}/questions")
def admin_list_questions(subject_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    _get_or_404(db, Subject, subject_id, "Subject not found")
    questions = db.query(Question).filter(Question.subject_id == subject_id).order_by(Question.id).all()
    return {"questions": [QuestionOut.model_validate(q) for q in questions]}


@router.post("/admin/subjects/{subject_id}/questions", status_code=status.HTTP_201_CREATED)
def create_question(
    subject_id: int,
    payload: QuestionIn,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _get_or_404(db, Subject, subject_id, "Subject not found")
    if not payload.question or not payload.answer:
        raise ValidationError("Question and answer are required")
    question = _save(
        db,
        Question(subject_id=subject_id, question=payload.question, answer=payload.answer, options=payload.options),
    )
    return {"message": "Question created", "question": QuestionOut.model_validate(question)}


@router.put("/admin/questions/{question_id}")
def update_question(
    question_id: int,
    payload: QuestionIn,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question = _get_or_404(db, Question, question_id, "Question not found")
    # Обновляем только переданные поля
    for name, value in payload.model_dump(exclude_unset=True).items():
        if name in ("question", "answer"):
            value = _required(value, f"{name} cannot be empty")
        setattr(question, name, value)
    db.commit()
    db.refresh(question)
    return {"message": "Question updated", "question": QuestionOut.model_validate(question)}


@router.delete("/admin/questions/{question_id}")
def delete_question(question_id: int, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    question = _get_or_404(db, Question, question_id, "Question not found")
    db.delete(question)
    db.commit()
    return {"message": "Question deleted"}


# ---------------- CLASSES ----------------

@router.get("/subjects/{subject_id}/classes")
def list_classes(subject_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    _get_or_404(db, Subject, subject_id, "Subject not found")
    classes = db.query(SchoolClass).filter(SchoolClass.subject_id == subject_id).order_by(SchoolClass.id).all()
    return {"classes": [ClassOut.model_validate(c) for c in classes]}


@router.post("/admin/subjects/{subject_id}/classes", status_code=status.HTTP_201_CREATED)
def create_class(
    subject_id: int,
    payload: ClassIn,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _get_or_404(db, Subject, subject_id, "Subject not found")
    school_class = _save(db, SchoolClass(subject_id=subject_id, name=_required(payload.name, "Class name is required")))
    return {"message": "Class created", "class": ClassOut.model_validate(school_class)}


# ---------------- COURSES ----------------

@router.get("/classes/{class_id}/courses")
def list_courses(class_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    _get_or_404(db, SchoolClass, class_id, "Class not found")
    courses = db.query(Course).filter(Course.class_id == class_id).order_by(Course.id).all()
    return {"courses": [CourseOut.model_validate(c) for c in courses]}


@router.post("/admin/classes/{class_id}/courses", status_code=status.HTTP_201_CREATED)
def create_course(
    class_id: int,
    payload: CourseIn,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _get_or_404(db, SchoolClass, class_id, "Class not found")
    if not payload.title or not payload.content:
        raise ValidationError("Title and content are required")
    course = _save(db, Course(class_id=class_id, title=payload.title, content=payload.content))
    return {"message": "Course created", "course": CourseOut.model_validate(course)}


def _get_course_in_class(db: Session, class_id: int, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id, Course.class_id == class_id).first()
    if course is None:
        raise NotFound("Course not found")
    return course


@router.put("/admin/classes/{class_id}/courses/{course_id}")
def update_course(
    class_id: int,
    course_id: int,
    payload: CourseIn,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    course = _get_course_in_class(db, class_id, course_id)
    for name, value in payload.model_dump(exclude_unset=True).items():
        setattr(course, name, _required(value, f"{name} cannot be empty"))
    db.commit()
    db.refresh(course)
    return {"message": "Course updated", "course": CourseOut.model_validate(course)}


@router.delete("/admin/classes/{class_id}/courses/{course_id}")
def delete_course(
    class_id: int,
    course_id: int,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    course = _get_course_in_class(db, class_id, course_id)
    db.delete(course)
    db.commit()
    return {"message": "Course deleted"}


@router.get("/courses/{course_id}")
def get_course(course_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    course = _get_or_404(db, Course, course_id, "Course not found")
    return {"course": CourseOut.model_validate(course)}
