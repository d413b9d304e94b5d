"""Internal constants shared across the library."""

USER_AGENT = "jmsfleet/1.0"
REST_PREFIX = "/rest/v1"

# ------------------------------------------------------------------
# Persisted tables
# ------------------------------------------------------------------

TABLE_USERS = "app_users"
TABLE_RENTALS = "rentals"
TABLE_COSTS = "costs"
TABLE_LOCATIONS = "rental_locations"
TABLE_FLEET = "fleet"
TABLE_CHECKLISTS = "checklists"
TABLE_COMPANY_PROFILE = "company_profile"
TABLE_PRICE_TABLE = "price_table"

#: Singleton configuration rows always live under this id.
SINGLETON_ID = 1

# PostgREST / Postgres codes meaning "this table does not exist (yet)".
MISSING_TABLE_CODES: frozenset[str] = frozenset({"PGRST205", "42P01"})

# Column, header and form names whose values never reach the logs (snake_case).
SENSITIVE_LOG_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "confirm_password",
        "apikey",
        "api_key",
        "authorization",
        "access_token",
        "refresh_token",
        "cookie",
    }
)

# ------------------------------------------------------------------
# Presentation conventions
# ------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 10
DEFAULT_NOTIFICATION_TTL = 4.0
DEFAULT_LOCATION = "Doca Principal - Marina Azul"

# Dropdown values that mean "do not filter on this dimension".
WILDCARDS: frozenset[str] = frozenset(
    {
        "",
        "Todos",
        "Todas",
        "Todos Status",
        "Todos Perfis",
        "Status: Todos",
        "Todos os Períodos",
    }
)

MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Fev",
    "Mar",
    "Abr",
    "Mai",
    "Jun",
    "Jul",
    "Ago",
    "Set",
    "Out",
    "Nov",
    "Dez",
)
