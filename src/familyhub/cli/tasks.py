"""
Maintenance tasks for familyhub, run with invoke.

    familyhub-tasks init-db
    familyhub-tasks seed-categories
    familyhub-tasks add-member --name "Grandma Rose" --relationship Grandmother
    familyhub-tasks batch-upload --directory ./scans --people "Rose,Tom"

Every task loads ``--env-file`` (default ``.env``) before touching the
backend, so the same variables as the Streamlit app apply.
"""

import os
from datetime import date
from pathlib import Path

import structlog
from dotenv import load_dotenv
from invoke import Collection, Context, Program, task

from familyhub import __version__
from familyhub.config import get_config
from familyhub.models.family import FamilyMember
from familyhub.services.family_data import FamilyDataService, get_family_data_service
from familyhub.services.storage import guess_content_type

logger = structlog.get_logger()

DEFAULT_CATEGORIES = [
    ("Holidays", "Holiday celebrations and traditions", "#e4572e"),
    ("Birthdays", "Birthday parties and celebrations", "#f3a712"),
    ("Vacations", "Trips and adventures away from home", "#29335c"),
    ("Family Gatherings", "Reunions, dinners and get-togethers", "#669bbc"),
    ("Everyday Moments", "The little things in between", "#a8c686"),
    ("Milestones", "Firsts, graduations and big days", "#8e4162"),
]

SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".heif"}


def _load_env(env_file: str) -> None:
    if os.path.exists(env_file):
        load_dotenv(dotenv_path=env_file)
        get_config().clear_cache()
        logger.info("env_file_loaded", env_file=env_file)
    else:
        logger.warning("env_file_not_found", env_file=env_file)


def _service(env_file: str) -> FamilyDataService:
    _load_env(env_file)
    return get_family_data_service()


@task
def init_db(c: Context, env_file: str = ".env"):
    """
    Create the database file and schema (restoring the GCS backup first if there is one).
    """
    service = _service(env_file)
    if not service.db.verify_schema():
        service.db.initialize_schema()
    service.backup_database()
    print(f"Database ready at {service.db.db_path}")


@task
def seed_categories(c: Context, env_file: str = ".env"):
    """
    Add the default photo categories that do not exist yet.
    """
    service = _service(env_file)
    result = service.get_photo_categories()
    if result.failed:
        raise SystemExit(f"Could not read categories: {result.error}")

    existing = {category.name.lower() for category in result.data}
    created = 0
    for name, description, color in DEFAULT_CATEGORIES:
        if name.lower() in existing:
            continue
        if service.create_photo_category(name, description, color) is None:
            raise SystemExit(f"Could not create category {name}")
        created += 1
    print(f"Created {created} categor{'y' if created == 1 else 'ies'}")


@task(
    help={
        "name": "Display name",
        "relationship": "Relationship label, e.g. Grandmother",
        "birthday": "Birthday as YYYY-MM-DD",
        "fun_fact": "Fun fact; repeat the flag for more",
    },
    iterable=["fun_fact"],
)
def add_member(
    c: Context,
    name: str,
    relationship: str = "",
    nickname: str = "",
    birthday: str = "",
    bio: str = "",
    fun_fact=None,
    env_file: str = ".env",
):
    """
    Add a family member.
    """
    if not name.strip():
        raise SystemExit("--name is required")
    parsed_birthday = date.fromisoformat(birthday) if birthday else None

    member: FamilyMember | None = _service(env_file).create_family_member(
        {
            "name": name.strip(),
            "relationship": relationship,
            "nickname": nickname,
            "birthday": parsed_birthday,
            "bio": bio,
            "fun_facts": list(fun_fact or []),
        }
    )
    if member is None:
        raise SystemExit("Could not create member")
    print(f"Added {member.name} ({member.id})")


@task
def batch_upload(
    c: Context,
    directory: str,
    category: str = "",
    people: str = "",
    recursive: bool = False,
    dry_run: bool = False,
    env_file: str = ".env",
):
    """
    Upload every image in a directory as a family photo.

    Args:
        directory: Directory containing images
        category: Category name applied to every photo
        people: Comma-separated names tagged on every photo
        recursive: Search subdirectories too
        dry_run: List the files without uploading
    """
    root = Path(directory)
    if not root.is_dir():
        raise SystemExit(f"Directory not found: {directory}")

    pattern = "**/*" if recursive else "*"
    image_files = sorted(
        path for path in root.glob(pattern) if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
    )
    if not image_files:
        logger.warning("no_image_files_found", directory=directory)
        return

    if dry_run:
        for path in image_files:
            print(f"- {path}")
        return

    service = _service(env_file)
    category_id = None
    if category:
        matches = [item for item in service.get_photo_categories().data if item.name.lower() == category.lower()]
        if not matches:
            raise SystemExit(f"Unknown category: {category}")
        category_id = matches[0].id

    names = [name.strip() for name in people.split(",") if name.strip()]
    members = {member.name: member.id for member in service.get_family_members().data}
    member_ids = [members[name] for name in names if name in members]

    failed = 0
    for path in image_files:
        photo = service.upload_family_photo(
            path.read_bytes(),
            path.name,
            guess_content_type(path.name),
            {"title": path.stem, "category_id": category_id, "tags": names},
            member_ids,
        )
        if photo is None:
            failed += 1
            print(f"FAILED {path}")
        else:
            print(f"uploaded {path} -> {photo.image_url}")

    logger.info("batch_upload_completed", total=len(image_files), failed=failed)
    if failed:
        raise SystemExit(f"{failed} of {len(image_files)} uploads failed")


namespace = Collection(init_db, seed_categories, add_member, batch_upload)
program = Program(namespace=namespace, version=__version__)
