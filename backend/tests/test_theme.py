from app.schemas.theme import DEFAULT_THEME
from app.services.theme import load_theme, theme_css_vars, theme_url, validate_theme

TENANT_URL = "https://theme.test/tenants/acme/apply/theme.json"
GLOBAL_URL = "https://theme.test/tenants/smartytalent/apply/theme.json"


def test_validate_theme_unwraps_customizer_envelope():
    theme = validate_theme({"customizer": {"primaryColor": "#ff0000", "brandName": "Acme"}})
    assert theme == {"primary_color": "#ff0000", "brand_name": "Acme"}


def test_validate_theme_drops_bad_values():
    theme = validate_theme(
        {
            "logoUrl": "ftp://logo",
            "brandName": "x" * 100,
            "primaryColor": "red",
            "secondaryColor": "#12",
            "buttonRadius": "9" * 20,
        }
    )
    assert theme == {}


def test_validate_theme_prefers_light_background():
    theme = validate_theme({"lightBackgroundColor": "#fff", "backgroundColor": "#000"})
    assert theme == {"background_color": "#fff"}
    assert validate_theme({"backgroundColor": "#000000ff"}) == {"background_color": "#000000ff"}


def test_validate_theme_non_object():
    assert validate_theme(None) == {}
    assert validate_theme(["#fff"]) == {}


def test_theme_url():
    assert theme_url("acme") == TENANT_URL


async def test_tenant_theme_overlays_defaults(upstream, http_client):
    upstream.json(TENANT_URL, {"primaryColor": "#111111", "logoUrl": "https://cdn.test/logo.png"})
    upstream.json(GLOBAL_URL, {"primaryColor": "#222222"})

    theme = await load_theme(http_client, "acme")

    assert theme.primary_color == "#111111"
    assert theme.logo_url == "https://cdn.test/logo.png"
    assert theme.secondary_color == DEFAULT_THEME.secondary_color
    assert upstream.sent("GET", GLOBAL_URL) == []


async def test_falls_back_to_global_theme(upstream, http_client):
    upstream.json(TENANT_URL, {"unrelated": True})
    upstream.json(GLOBAL_URL, {"customizer": {"secondaryColor": "#333333"}})

    theme = await load_theme(http_client, "acme")

    assert theme.secondary_color == "#333333"
    assert theme.primary_color == DEFAULT_THEME.primary_color


async def test_default_tenant_skips_tenant_fetch(upstream, http_client):
    upstream.json(GLOBAL_URL, {"buttonRadius": "1rem"})

    theme = await load_theme(http_client, "default")

    assert theme.button_radius == "1rem"
    assert all("/tenants/default/" not in str(r.url) for r in upstream.requests)


async def test_builtin_default_when_cdn_fails(upstream, http_client):
    upstream.respond("GET", TENANT_URL, 500)
    upstream.respond("GET", GLOBAL_URL, 200, content=b"not json")

    theme = await load_theme(http_client, "acme")

    assert theme == DEFAULT_THEME


def test_css_vars():
    assert theme_css_vars(DEFAULT_THEME) == {
        "--primary-color": "#2563eb",
        "--secondary-color": "#1e40af",
        "--background-color": "#f8fafc",
        "--button-radius": "0.5rem",
    }
