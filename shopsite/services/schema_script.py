"""
Idempotent Postgres schema replayed into a client's hosted project.
Every statement can run against a database that already has some or all of it.
"""

_ENUMS = {
    "app_role": ("admin", "user", "super_admin"),
    "user_permission": ("read", "write", "change_password", "manage_appointments", "manage_services"),
}

_TABLES = {
    "profiles": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        user_id UUID NOT NULL UNIQUE,
        email TEXT,
        full_name TEXT,
        avatar_url TEXT,
        is_approved BOOLEAN NOT NULL DEFAULT false,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
    """,
    "user_roles": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        user_id UUID NOT NULL,
        role public.app_role NOT NULL DEFAULT 'user',
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        UNIQUE (user_id, role)
    """,
    "user_permissions": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        user_id UUID NOT NULL,
        permission public.user_permission NOT NULL,
        granted_by UUID,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        UNIQUE (user_id, permission)
    """,
    "services": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        price NUMERIC NOT NULL DEFAULT 0,
        display_order INTEGER NOT NULL DEFAULT 0,
        is_active BOOLEAN NOT NULL DEFAULT true,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
    """,
    "appointments": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        user_name TEXT NOT NULL,
        user_email TEXT NOT NULL,
        user_phone TEXT,
        service_type TEXT,
        appointment_date DATE NOT NULL,
        appointment_time TIME WITHOUT TIME ZONE NOT NULL,
        notes TEXT,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'confirmed', 'cancelled', 'completed')),
        cancelled_by UUID,
        cancelled_at TIMESTAMP WITH TIME ZONE,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
    """,
    "sessions": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        user_id UUID NOT NULL,
        ip_address TEXT,
        user_agent TEXT,
        is_active BOOLEAN NOT NULL DEFAULT true,
        login_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        logout_at TIMESTAMP WITH TIME ZONE
    """,
    "coupons": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        name TEXT NOT NULL,
        code TEXT NOT NULL UNIQUE,
        discount_percent INTEGER NOT NULL CHECK (discount_percent BETWEEN 1 AND 100),
        is_active BOOLEAN NOT NULL DEFAULT true,
        expires_at TIMESTAMP WITH TIME ZONE,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
    """,
    "site_settings": """
        id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
        key TEXT NOT NULL UNIQUE,
        value TEXT,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
    """,
}

_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_active_slot "
    "ON public.appointments (appointment_date, appointment_time) WHERE status <> 'cancelled';",
]

_SEED = [
    "INSERT INTO public.site_settings (key, value) VALUES ('maintenance_mode', 'false') "
    "ON CONFLICT (key) DO NOTHING;",
]


def _enum_statement(name: str, values: tuple) -> str:
    labels = ", ".join(f"'{v}'" for v in values)
    return (
        "DO $$ BEGIN "
        f"CREATE TYPE public.{name} AS ENUM ({labels}); "
        "EXCEPTION WHEN duplicate_object THEN NULL; "
        "END $$;"
    )


def build_schema_statements() -> list[str]:
    """Statements in dependency order: enums, tables, indexes, row level security, seed data"""
    statements = [_enum_statement(name, values) for name, values in _ENUMS.items()]
    statements += [
        f"CREATE TABLE IF NOT EXISTS public.{table} ({columns.strip()});"
        for table, columns in _TABLES.items()
    ]
    statements += _INDEXES
    statements += [f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY;" for table in _TABLES]
    statements += _SEED
    return statements
