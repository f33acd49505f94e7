# app/db/base.py
# Declarative база для всех моделей (users, subjects, quiz_results, payments).
# Модуль не импортирует модели, иначе получим циклический импорт.

from sqlalchemy.orm import declarative_base

Base = declarative_base()
