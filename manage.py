"""
Управление проектом - CLI команды.

Использование:
    python manage.py create-tables
    python manage.py check-db
    python manage.py reset-db [--yes]
    python manage.py seed-db
    python manage.py serve
"""

import argparse

from sqlalchemy import func

from tutor_api.config import Settings, get_settings
from tutor_api.core.database import Base, create_db_engine, create_session_factory
from tutor_api.core.models import TutoringSession, User
from tutor_api.core.security import hash_password

TEST_USERS = [
    {"email": "user1@test.com", "name": "User One", "password": "password123"},
    {"email": "user2@test.com", "name": "User Two", "password": "password123"},
    {"email": "admin@test.com", "name": "Admin", "password": "admin12345"},
]


def create_tables(settings: Settings, engine=None, **_):
    """Создать таблицы в БД (если их нет)"""
    engine = engine or create_db_engine(settings)
    Base.metadata.create_all(bind=engine)
    print("✅ Таблицы созданы\n")


def check_db(settings: Settings, engine=None, **_):
    """Проверка базы данных - показать всех пользователей"""
    engine = engine or create_db_engine(settings)
    db = create_session_factory(engine)()

    try:
        rows = (
            db.query(User, func.count(TutoringSession.id))
            .outerjoin(TutoringSession, TutoringSession.user_id == User.id)
            .group_by(User.id)
            .order_by(User.id)
            .all()
        )

        print(f"\n📊 Всего пользователей в БД: {len(rows)}\n")
        print("=" * 60)

        if not rows:
            print("⚠️  База данных пустая.")
            print("   Зарегистрируйте пользователя через /auth/register\n")
            return rows

        for user, session_count in rows:
            print(f"ID: {user.id}")
            print(f"Email: {user.email}")
            print(f"Имя: {user.name}")
            print(f"Сессий: {session_count}")
            print(f"Создан: {user.created_at}")
            print("-" * 60)

        return rows
    finally:
        db.close()


def reset_db(settings: Settings, engine=None, yes: bool = False, **_):
    """Сброс базы данных (удалить все таблицы и создать заново)"""
    if not yes:
        print("⚠️  ВНИМАНИЕ: Это удалит все данные из БД!")
        confirm = input("Продолжить? (yes/no): ")

        if confirm.lower() != "yes":
            print("❌ Отменено")
            return False

    engine = engine or create_db_engine(settings)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("✅ База данных сброшена\n")
    return True


def seed_db(settings: Settings, engine=None, **_):
    """Заполнить БД тестовыми пользователями"""
    engine = engine or create_db_engine(settings)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    created = 0

    try:
        for user_data in TEST_USERS:
            # Проверяем что пользователь ещё не существует
            existing = db.query(User).filter(User.email == user_data["email"]).first()
            if existing:
                print(f"⚠️  Пользователь {user_data['email']} уже существует")
                continue

            db.add(
                User(
                    email=user_data["email"],
                    name=user_data["name"],
                    password=hash_password(user_data["password"]),
                )
            )
            created += 1
            print(f"✅ Создан пользователь: {user_data['email']}")

        db.commit()
    finally:
        db.close()

    print("\n✅ Тестовые данные добавлены\n")
    return created


def serve(settings: Settings, **_):
    """Запустить API (uvicorn)"""
    import uvicorn

    uvicorn.run("tutor_api.main:app", host=settings.api_host, port=settings.api_port)


COMMANDS = {
    "create-tables": create_tables,
    "check-db": check_db,
    "reset-db": reset_db,
    "seed-db": seed_db,
    "serve": serve,
}


def main(argv=None):
    """Главная функция - обработка команд"""
    parser = argparse.ArgumentParser(description="Управление проектом Tutoring API")

    parser.add_argument("command", choices=list(COMMANDS), help="Команда для выполнения")
    parser.add_argument("--yes", action="store_true", help="Не спрашивать подтверждение (reset-db)")

    args = parser.parse_args(argv)

    COMMANDS[args.command](get_settings(), yes=args.yes)


if __name__ == "__main__":
    main()
