"""
Database schema definitions for familyhub.

One DuckDB table per family entity plus the photo/member association table.
List-valued attributes (fun facts, attendees, tags) use DuckDB ``VARCHAR[]``.
"""

FAMILY_MEMBERS_TABLE = """
CREATE TABLE IF NOT EXISTS family_members (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    relationship TEXT,
    nickname TEXT,
    birthday DATE,
    bio TEXT,
    fun_facts VARCHAR[],
    avatar_url TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

FAMILY_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS family_events (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    event_date TIMESTAMP NOT NULL,
    location TEXT,
    description TEXT,
    attendees VARCHAR[],
    event_type TEXT,
    photos VARCHAR[],
    is_recurring BOOLEAN DEFAULT FALSE,
    recurrence_pattern TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

PHOTO_CATEGORIES_TABLE = """
CREATE TABLE IF NOT EXISTS photo_categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    color TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

FAMILY_PHOTOS_TABLE = """
CREATE TABLE IF NOT EXISTS family_photos (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    image_url TEXT NOT NULL,
    location TEXT,
    taken_date DATE,
    tags VARCHAR[],
    category_id TEXT,
    featured BOOLEAN DEFAULT FALSE,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

FAMILY_POSTS_TABLE = """
CREATE TABLE IF NOT EXISTS family_posts (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    author_id TEXT,
    post_date TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    images VARCHAR[],
    tags VARCHAR[],
    is_milestone BOOLEAN DEFAULT FALSE,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

FAMILY_MEMORIES_TABLE = """
CREATE TABLE IF NOT EXISTS family_memories (
    id TEXT PRIMARY KEY,
    member_id TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    memory_date DATE,
    location TEXT,
    is_favorite BOOLEAN DEFAULT FALSE,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

PHOTO_MEMBERS_TABLE = """
CREATE TABLE IF NOT EXISTS photo_members (
    photo_id TEXT NOT NULL,
    member_id TEXT NOT NULL,
    PRIMARY KEY (photo_id, member_id)
);
"""

TABLE_SCHEMAS = {
    "family_members": FAMILY_MEMBERS_TABLE,
    "family_events": FAMILY_EVENTS_TABLE,
    "photo_categories": PHOTO_CATEGORIES_TABLE,
    "family_photos": FAMILY_PHOTOS_TABLE,
    "family_posts": FAMILY_POSTS_TABLE,
    "family_memories": FAMILY_MEMORIES_TABLE,
    "photo_members": PHOTO_MEMBERS_TABLE,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_date ON family_events(event_date);",
    "CREATE INDEX IF NOT EXISTS idx_photos_taken ON family_photos(taken_date);",
    "CREATE INDEX IF NOT EXISTS idx_photos_category ON family_photos(category_id);",
    "CREATE INDEX IF NOT EXISTS idx_memories_member ON family_memories(member_id);",
    "CREATE INDEX IF NOT EXISTS idx_photo_members_member ON photo_members(member_id);",
]

# Columns each table must expose; used to verify an existing database file.
REQUIRED_COLUMNS = {
    "family_members": {"id", "name", "relationship", "birthday", "bio", "fun_facts", "avatar_url"},
    "family_events": {"id", "title", "event_date", "location", "attendees", "event_type", "photos"},
    "photo_categories": {"id", "name", "description", "color"},
    "family_photos": {"id", "title", "image_url", "location", "taken_date", "tags", "category_id", "featured"},
    "family_posts": {"id", "title", "content", "post_date"},
    "family_memories": {"id", "member_id", "title", "content", "memory_date", "location", "is_favorite"},
    "photo_members": {"photo_id", "member_id"},
}


def get_schema_statements() -> list[str]:
    """
    Get all database schema creation statements.

    Returns:
        List of SQL statements to create tables and indexes
    """
    return list(TABLE_SCHEMAS.values()) + INDEXES


def get_table_names() -> list[str]:
    """Names of all tables the application manages."""
    return list(TABLE_SCHEMAS)
