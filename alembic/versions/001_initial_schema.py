"""001 – Initial schema: all tables, indexes and enums.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("tenant_plan", ["basic", "premium", "enterprise"]),
    ("tenant_status", ["active", "suspended", "inactive"]),
    ("user_role", ["super_admin", "admin", "hr_manager", "employee", "customer"]),
    ("departure_status", ["scheduled", "cancelled"]),
    ("review_item_type", ["cruise", "hotel", "package"]),
    ("booking_type", ["cruise", "hotel", "package"]),
    ("booking_status", ["pending", "confirmed", "cancelled", "completed"]),
    ("payment_status", ["unpaid", "paid", "refunded"]),
    ("employee_status", ["active", "on_leave", "terminated"]),
    ("attendance_status", ["present", "absent", "late", "half_day"]),
    ("leave_type", ["annual", "sick", "personal", "maternity", "paternity", "unpaid"]),
    ("leave_status", ["pending", "approved", "rejected"]),
    ("payroll_status", ["pending", "processing", "paid"]),
    ("media_category", ["image", "video", "document", "audio", "archive", "other"]),
    ("setting_type", ["text", "textarea", "number", "boolean", "json", "image", "video"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')
    op.execute('CREATE EXTENSION IF NOT EXISTS "pg_trgm"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. tenants ────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE tenants (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name          VARCHAR(200) NOT NULL,
            slug          VARCHAR(100) NOT NULL UNIQUE,
            domain        VARCHAR(255) UNIQUE,
            subdomain     VARCHAR(100) NOT NULL UNIQUE,
            plan          tenant_plan NOT NULL DEFAULT 'basic',
            status        tenant_status NOT NULL DEFAULT 'active',
            settings      JSONB DEFAULT '{}',
            contact_email VARCHAR(255),
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 2. users ──────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE users (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id     UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            email         VARCHAR(255) NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            first_name    VARCHAR(100) NOT NULL,
            last_name     VARCHAR(100) NOT NULL,
            phone         VARCHAR(30),
            avatar        VARCHAR(500),
            role          user_role NOT NULL DEFAULT 'customer',
            is_active     BOOLEAN NOT NULL DEFAULT TRUE,
            last_login_at TIMESTAMPTZ,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_tenant_email UNIQUE (tenant_id, email)
        )
    """)
    op.execute("CREATE INDEX ix_users_tenant_role ON users(tenant_id, role)")

    # ── 3. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id     UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            tenant_id   UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            token_hash  VARCHAR(512) NOT NULL,
            ip_address  INET,
            user_agent  TEXT,
            expires_at  TIMESTAMPTZ NOT NULL,
            is_revoked  BOOLEAN NOT NULL DEFAULT FALSE,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_user_sessions_token_hash ON user_sessions(token_hash)")
    op.execute("CREATE INDEX ix_user_sessions_user       ON user_sessions(user_id)")

    # ── 4. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id   UUID REFERENCES tenants(id) ON DELETE CASCADE,
            actor_id    UUID REFERENCES users(id) ON DELETE SET NULL,
            action      VARCHAR(50) NOT NULL,
            entity_type VARCHAR(50) NOT NULL,
            entity_id   UUID NOT NULL,
            old_values  JSONB,
            new_values  JSONB,
            ip_address  INET,
            user_agent  TEXT,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id   ON audit_trail(actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity     ON audit_trail(entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")

    # ── 5. cruise_categories ──────────────────────────────────────────────
    op.execute("""
        CREATE TABLE cruise_categories (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id   UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name        VARCHAR(150) NOT NULL,
            slug        VARCHAR(160) NOT NULL,
            description TEXT,
            icon        VARCHAR(100),
            sort_order  INTEGER NOT NULL DEFAULT 0,
            is_active   BOOLEAN NOT NULL DEFAULT TRUE,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_cruise_category_slug UNIQUE (tenant_id, slug)
        )
    """)
    op.execute("CREATE INDEX ix_cruise_categories_tenant_id ON cruise_categories(tenant_id)")

    # ── 6. cruises ────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE cruises (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id      UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            category_id    UUID REFERENCES cruise_categories(id) ON DELETE SET NULL,
            name           VARCHAR(200) NOT NULL,
            slug           VARCHAR(220) NOT NULL,
            description    TEXT,
            departure_port VARCHAR(150) NOT NULL,
            destination    VARCHAR(150) NOT NULL,
            duration       INTEGER NOT NULL,
            capacity       INTEGER NOT NULL,
            price          NUMERIC(10, 2) NOT NULL,
            rating         NUMERIC(3, 2) NOT NULL DEFAULT 0,
            review_count   INTEGER NOT NULL DEFAULT 0,
            images         JSONB NOT NULL DEFAULT '[]',
            amenities      JSONB NOT NULL DEFAULT '[]',
            itinerary      JSONB NOT NULL DEFAULT '[]',
            highlights     JSONB NOT NULL DEFAULT '[]',
            is_active      BOOLEAN NOT NULL DEFAULT TRUE,
            created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_cruise_slug UNIQUE (tenant_id, slug),
            CONSTRAINT ck_cruise_capacity CHECK (capacity >= 0),
            CONSTRAINT ck_cruise_price CHECK (price >= 0)
        )
    """)
    op.execute("CREATE INDEX ix_cruises_tenant_id ON cruises(tenant_id)")
    op.execute("CREATE INDEX ix_cruises_name_trgm ON cruises USING gin (name gin_trgm_ops)")

    # ── 7. cruise_departures ──────────────────────────────────────────────
    op.execute("""
        CREATE TABLE cruise_departures (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id        UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            cruise_id        UUID NOT NULL REFERENCES cruises(id) ON DELETE CASCADE,
            departure_date   DATE NOT NULL,
            return_date      DATE NOT NULL,
            available_cabins INTEGER NOT NULL DEFAULT 0,
            price_override   NUMERIC(10, 2),
            status           departure_status NOT NULL DEFAULT 'scheduled',
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_cruise_departure_date UNIQUE (cruise_id, departure_date),
            CONSTRAINT ck_departure_dates CHECK (return_date > departure_date)
        )
    """)
    op.execute("CREATE INDEX ix_cruise_departures_tenant_id ON cruise_departures(tenant_id)")

    # ── 8. hotels ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE hotels (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id       UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name            VARCHAR(200) NOT NULL,
            slug            VARCHAR(220) NOT NULL,
            description     TEXT,
            address         TEXT,
            city            VARCHAR(120) NOT NULL,
            country         VARCHAR(120) NOT NULL,
            rating          NUMERIC(3, 2) NOT NULL DEFAULT 0,
            review_count    INTEGER NOT NULL DEFAULT 0,
            price_per_night NUMERIC(10, 2) NOT NULL,
            images          JSONB NOT NULL DEFAULT '[]',
            amenities       JSONB NOT NULL DEFAULT '[]',
            rooms           JSONB NOT NULL DEFAULT '[]',
            is_active       BOOLEAN NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_hotel_slug UNIQUE (tenant_id, slug),
            CONSTRAINT ck_hotel_price CHECK (price_per_night >= 0)
        )
    """)
    op.execute("CREATE INDEX ix_hotels_tenant_id ON hotels(tenant_id)")
    op.execute("CREATE INDEX ix_hotels_name_trgm ON hotels USING gin (name gin_trgm_ops)")

    # ── 9. packages ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE packages (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id    UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name         VARCHAR(200) NOT NULL,
            slug         VARCHAR(220) NOT NULL,
            description  TEXT,
            destination  VARCHAR(150) NOT NULL,
            duration     INTEGER NOT NULL,
            price        NUMERIC(10, 2) NOT NULL,
            rating       NUMERIC(3, 2) NOT NULL DEFAULT 0,
            review_count INTEGER NOT NULL DEFAULT 0,
            images       JSONB NOT NULL DEFAULT '[]',
            inclusions   JSONB NOT NULL DEFAULT '[]',
            exclusions   JSONB NOT NULL DEFAULT '[]',
            itinerary    JSONB NOT NULL DEFAULT '[]',
            is_active    BOOLEAN NOT NULL DEFAULT TRUE,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_package_slug UNIQUE (tenant_id, slug),
            CONSTRAINT ck_package_price CHECK (price >= 0)
        )
    """)
    op.execute("CREATE INDEX ix_packages_tenant_id ON packages(tenant_id)")
    op.execute("CREATE INDEX ix_packages_name_trgm ON packages USING gin (name gin_trgm_ops)")

    # ── 10. reviews ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE reviews (
            id         UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id  UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            item_type  review_item_type NOT NULL,
            item_id    UUID NOT NULL,
            user_id    UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            rating     INTEGER NOT NULL,
            comment    TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_review_rating CHECK (rating BETWEEN 1 AND 5)
        )
    """)
    op.execute("CREATE INDEX ix_reviews_tenant_id ON reviews(tenant_id)")
    op.execute("CREATE INDEX ix_reviews_item      ON reviews(item_type, item_id)")

    # ── 11. bookings ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE bookings (
            id                   UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id            UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            user_id              UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            reference            VARCHAR(20) NOT NULL UNIQUE,
            booking_type         booking_type NOT NULL,
            cruise_id            UUID REFERENCES cruises(id) ON DELETE SET NULL,
            hotel_id             UUID REFERENCES hotels(id) ON DELETE SET NULL,
            package_id           UUID REFERENCES packages(id) ON DELETE SET NULL,
            guests               INTEGER NOT NULL,
            adults               INTEGER NOT NULL DEFAULT 1,
            children             INTEGER NOT NULL DEFAULT 0,
            sailing_date         DATE,
            travel_date          DATE,
            check_in             DATE,
            check_out            DATE,
            cabin_type           VARCHAR(30),
            addons               JSONB NOT NULL DEFAULT '[]',
            promo_code           VARCHAR(50),
            subtotal             NUMERIC(12, 2) NOT NULL DEFAULT 0,
            discount             NUMERIC(12, 2) NOT NULL DEFAULT 0,
            taxes                NUMERIC(12, 2) NOT NULL DEFAULT 0,
            fees                 NUMERIC(12, 2) NOT NULL DEFAULT 0,
            total_amount         NUMERIC(12, 2) NOT NULL,
            status               booking_status NOT NULL DEFAULT 'pending',
            payment_status       payment_status NOT NULL DEFAULT 'unpaid',
            payment_reference    VARCHAR(100),
            special_requests     TEXT,
            admin_notes          TEXT,
            cancellation_reason  TEXT,
            assigned_agent_id    UUID REFERENCES users(id) ON DELETE SET NULL,
            confirmed_at         TIMESTAMPTZ,
            cancelled_at         TIMESTAMPTZ,
            completed_at         TIMESTAMPTZ,
            reminder_sent_at     TIMESTAMPTZ,
            confirmation_sent_at TIMESTAMPTZ,
            created_at           TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at           TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_booking_guests CHECK (guests >= 1)
        )
    """)
    op.execute("CREATE INDEX ix_bookings_tenant_status  ON bookings(tenant_id, status)")
    op.execute("CREATE INDEX ix_bookings_cruise_sailing ON bookings(cruise_id, sailing_date)")
    op.execute("CREATE INDEX ix_bookings_user           ON bookings(user_id)")

    # ── 12. blog_posts ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE blog_posts (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id      UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            author_id      UUID REFERENCES users(id) ON DELETE SET NULL,
            title          VARCHAR(255) NOT NULL,
            slug           VARCHAR(280) NOT NULL,
            content        TEXT NOT NULL,
            excerpt        VARCHAR(500),
            featured_image VARCHAR(500),
            category       VARCHAR(100),
            tags           JSONB NOT NULL DEFAULT '[]',
            published      BOOLEAN NOT NULL DEFAULT FALSE,
            published_at   TIMESTAMPTZ,
            view_count     INTEGER NOT NULL DEFAULT 0,
            created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_blog_post_slug UNIQUE (tenant_id, slug)
        )
    """)
    op.execute("CREATE INDEX ix_blog_posts_tenant_id        ON blog_posts(tenant_id)")
    op.execute("CREATE INDEX ix_blog_posts_category         ON blog_posts(category)")
    op.execute("CREATE INDEX ix_blog_posts_tenant_published ON blog_posts(tenant_id, published)")

    # ── 13. blog_comments ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE blog_comments (
            id         UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id  UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            post_id    UUID NOT NULL REFERENCES blog_posts(id) ON DELETE CASCADE,
            user_id    UUID REFERENCES users(id) ON DELETE SET NULL,
            content    TEXT NOT NULL,
            approved   BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_blog_comments_tenant_id ON blog_comments(tenant_id)")
    op.execute("CREATE INDEX ix_blog_comments_post_id   ON blog_comments(post_id)")

    # ── 14. media_files ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE media_files (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id     UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            uploaded_by   UUID REFERENCES users(id) ON DELETE SET NULL,
            filename      VARCHAR(255) NOT NULL UNIQUE,
            original_name VARCHAR(255) NOT NULL,
            mime_type     VARCHAR(100) NOT NULL,
            size          BIGINT NOT NULL,
            category      media_category NOT NULL,
            folder        VARCHAR(100),
            title         VARCHAR(255),
            description   TEXT,
            alt_text      VARCHAR(255),
            tags          JSONB NOT NULL DEFAULT '[]',
            url           VARCHAR(500) NOT NULL,
            storage_path  VARCHAR(500) NOT NULL,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_media_files_tenant_id       ON media_files(tenant_id)")
    op.execute("CREATE INDEX ix_media_files_folder          ON media_files(folder)")
    op.execute("CREATE INDEX ix_media_files_tenant_category ON media_files(tenant_id, category)")

    # ── 15. departments ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE departments (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id        UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name             VARCHAR(100) NOT NULL,
            description      TEXT,
            head_employee_id UUID,  -- FK added after employees table
            budget           NUMERIC(14, 2),
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_department_name UNIQUE (tenant_id, name)
        )
    """)
    op.execute("CREATE INDEX ix_departments_tenant_id ON departments(tenant_id)")

    # ── 16. employees ─────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id         UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            user_id           UUID NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
            employee_code     VARCHAR(20) NOT NULL,
            department_id     UUID REFERENCES departments(id) ON DELETE SET NULL,
            position          VARCHAR(100) NOT NULL,
            salary            NUMERIC(12, 2) NOT NULL DEFAULT 0,
            hire_date         DATE NOT NULL,
            manager_id        UUID REFERENCES employees(id) ON DELETE SET NULL,
            status            employee_status NOT NULL DEFAULT 'active',
            skills            JSONB NOT NULL DEFAULT '[]',
            bio               TEXT,
            address           TEXT,
            emergency_contact JSONB,
            created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_employee_code UNIQUE (tenant_id, employee_code)
        )
    """)
    op.execute("CREATE INDEX ix_employees_tenant_id ON employees(tenant_id)")

    # Deferred FK: departments.head_employee_id → employees.id
    op.execute("""
        ALTER TABLE departments
            ADD CONSTRAINT fk_dept_head
            FOREIGN KEY (head_employee_id) REFERENCES employees(id) ON DELETE SET NULL
    """)

    # ── 17. attendance_records ────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_records (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id   UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            employee_id UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            date        DATE NOT NULL,
            check_in    TIMESTAMPTZ,
            check_out   TIMESTAMPTZ,
            status      attendance_status NOT NULL DEFAULT 'present',
            notes       TEXT,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_attendance_emp_date UNIQUE (employee_id, date)
        )
    """)
    op.execute("CREATE INDEX ix_attendance_records_tenant_id   ON attendance_records(tenant_id)")
    op.execute("CREATE INDEX ix_attendance_records_employee_id ON attendance_records(employee_id)")

    # ── 18. leave_requests ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id   UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            employee_id UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            leave_type  leave_type NOT NULL,
            start_date  DATE NOT NULL,
            end_date    DATE NOT NULL,
            days        INTEGER NOT NULL,
            reason      TEXT,
            status      leave_status NOT NULL DEFAULT 'pending',
            decided_by  UUID REFERENCES users(id) ON DELETE SET NULL,
            decided_at  TIMESTAMPTZ,
            comments    TEXT,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_leave_dates CHECK (end_date >= start_date)
        )
    """)
    op.execute("CREATE INDEX ix_leave_requests_tenant_id   ON leave_requests(tenant_id)")
    op.execute("CREATE INDEX ix_leave_requests_employee_id ON leave_requests(employee_id)")

    # ── 19. payroll_records ───────────────────────────────────────────────
    op.execute("""
        CREATE TABLE payroll_records (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id    UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            month        INTEGER NOT NULL,
            year         INTEGER NOT NULL,
            basic_salary NUMERIC(12, 2) NOT NULL,
            allowances   NUMERIC(12, 2) NOT NULL DEFAULT 0,
            deductions   NUMERIC(12, 2) NOT NULL DEFAULT 0,
            bonus        NUMERIC(12, 2) NOT NULL DEFAULT 0,
            overtime     NUMERIC(12, 2) NOT NULL DEFAULT 0,
            net_salary   NUMERIC(12, 2) NOT NULL,
            status       payroll_status NOT NULL DEFAULT 'pending',
            paid_at      TIMESTAMPTZ,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payroll_period UNIQUE (employee_id, month, year),
            CONSTRAINT ck_payroll_month CHECK (month BETWEEN 1 AND 12)
        )
    """)
    op.execute("CREATE INDEX ix_payroll_records_tenant_id   ON payroll_records(tenant_id)")
    op.execute("CREATE INDEX ix_payroll_records_employee_id ON payroll_records(employee_id)")

    # ── 20. site_settings ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE site_settings (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id   UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            key         VARCHAR(100) NOT NULL,
            value       JSONB,
            value_type  setting_type NOT NULL DEFAULT 'text',
            category    VARCHAR(50) NOT NULL DEFAULT 'general',
            label       VARCHAR(150),
            description TEXT,
            is_public   BOOLEAN NOT NULL DEFAULT FALSE,
            updated_by  UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_site_setting_key UNIQUE (tenant_id, key)
        )
    """)
    op.execute("CREATE INDEX ix_site_settings_tenant_id       ON site_settings(tenant_id)")
    op.execute("CREATE INDEX ix_site_settings_tenant_category ON site_settings(tenant_id, category)")

    # ── 21. hero_settings ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE hero_settings (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id       UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            page            VARCHAR(50) NOT NULL,
            title           VARCHAR(200),
            subtitle        TEXT,
            cta_text        VARCHAR(100),
            cta_link        VARCHAR(500),
            video_url       VARCHAR(500),
            video_poster    VARCHAR(500),
            video_loop      BOOLEAN NOT NULL DEFAULT TRUE,
            video_autoplay  BOOLEAN NOT NULL DEFAULT TRUE,
            video_muted     BOOLEAN NOT NULL DEFAULT TRUE,
            fallback_image  VARCHAR(500),
            overlay_color   VARCHAR(20) NOT NULL DEFAULT '#000000',
            overlay_opacity NUMERIC(3, 2) NOT NULL DEFAULT 0.40,
            display_order   INTEGER NOT NULL DEFAULT 0,
            is_active       BOOLEAN NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_hero_page UNIQUE (tenant_id, page),
            CONSTRAINT ck_hero_overlay CHECK (overlay_opacity >= 0 AND overlay_opacity <= 1)
        )
    """)
    op.execute("CREATE INDEX ix_hero_settings_tenant_id ON hero_settings(tenant_id)")

    # ── 22. footer_configs ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE footer_configs (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id        UUID NOT NULL UNIQUE REFERENCES tenants(id) ON DELETE CASCADE,
            company_name     VARCHAR(200),
            company_tagline  VARCHAR(255),
            description      TEXT,
            logo             VARCHAR(500),
            copyright_text   VARCHAR(255),
            email            VARCHAR(255),
            phone            VARCHAR(50),
            address          TEXT,
            social_links     JSONB NOT NULL DEFAULT '{}',
            show_newsletter  BOOLEAN NOT NULL DEFAULT TRUE,
            newsletter_title VARCHAR(200),
            newsletter_text  TEXT,
            background_color VARCHAR(20),
            text_color       VARCHAR(20),
            accent_color     VARCHAR(20),
            is_active        BOOLEAN NOT NULL DEFAULT TRUE,
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 23. footer_sections ───────────────────────────────────────────────
    op.execute("""
        CREATE TABLE footer_sections (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id     UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            footer_id     UUID NOT NULL REFERENCES footer_configs(id) ON DELETE CASCADE,
            title         VARCHAR(100) NOT NULL,
            display_order INTEGER NOT NULL DEFAULT 0,
            is_active     BOOLEAN NOT NULL DEFAULT TRUE,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_footer_sections_tenant_id ON footer_sections(tenant_id)")
    op.execute("CREATE INDEX ix_footer_sections_footer_id ON footer_sections(footer_id)")

    # ── 24. footer_links ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE footer_links (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id       UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            section_id      UUID NOT NULL REFERENCES footer_sections(id) ON DELETE CASCADE,
            label           VARCHAR(100) NOT NULL,
            url             VARCHAR(500) NOT NULL,
            icon            VARCHAR(50),
            open_in_new_tab BOOLEAN NOT NULL DEFAULT FALSE,
            display_order   INTEGER NOT NULL DEFAULT 0,
            is_active       BOOLEAN NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_footer_links_tenant_id  ON footer_links(tenant_id)")
    op.execute("CREATE INDEX ix_footer_links_section_id ON footer_links(section_id)")

    # ── 25. content_pages ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE content_pages (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id       UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            title           VARCHAR(200) NOT NULL,
            slug            VARCHAR(220) NOT NULL,
            body            TEXT NOT NULL,
            seo_title       VARCHAR(200),
            seo_description VARCHAR(500),
            published       BOOLEAN NOT NULL DEFAULT FALSE,
            published_at    TIMESTAMPTZ,
            updated_by      UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_content_page_slug UNIQUE (tenant_id, slug)
        )
    """)
    op.execute("CREATE INDEX ix_content_pages_tenant_id ON content_pages(tenant_id)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "content_pages",
        "footer_links",
        "footer_sections",
        "footer_configs",
        "hero_settings",
        "site_settings",
        "payroll_records",
        "leave_requests",
        "attendance_records",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop deferred FK before dropping employees / departments
    op.execute(
        "ALTER TABLE departments DROP CONSTRAINT IF EXISTS fk_dept_head"
    )
    for t in [
        "employees",
        "departments",
        "media_files",
        "blog_comments",
        "blog_posts",
        "bookings",
        "reviews",
        "packages",
        "hotels",
        "cruise_departures",
        "cruises",
        "cruise_categories",
        "audit_trail",
        "user_sessions",
        "users",
        "tenants",
    ]:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop enum types
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    # Drop extensions
    op.execute('DROP EXTENSION IF EXISTS "pg_trgm"')
    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
