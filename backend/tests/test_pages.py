THEME_URL = "https://theme.test/tenants/acme/apply/theme.json"
GLOBAL_THEME_URL = "https://theme.test/tenants/smartytalent/apply/theme.json"
LOGO_URL = "https://cdn.test/tenants/acme/apply/logo.jpg"
BACKGROUND_URL = "https://cdn.test/tenant/acme/bg.jpg"
JOB_URL = "https://cdn.test/tenants/acme/apply/job-1.json"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "environment": "test"}


def test_default_apply_page_uses_built_in_theme(client, upstream):
    response = client.get("/")

    assert response.status_code == 200
    assert "--primary-color: #2563eb;" in response.text
    assert "Apply for this position" in response.text
    assert 'name="tenant" value="default"' in response.text
    assert 'data-thank-you-url="/thank-you"' in response.text
    # the default tenant only consults the global theme
    assert [str(r.url) for r in upstream.requests] == [GLOBAL_THEME_URL]


def test_tenant_page_applies_tenant_theme(client, upstream):
    upstream.json(THEME_URL, {"customizer": {"primaryColor": "#ff0000", "brandName": "Acme Corp"}})

    response = client.get("/acme")

    assert response.status_code == 200
    assert "--primary-color: #ff0000;" in response.text
    assert "--secondary-color: #1e40af;" in response.text
    assert "Acme Corp" in response.text
    assert 'data-thank-you-url="/acme/thank-you"' in response.text


def test_job_page_shows_localized_job_name(client, upstream):
    upstream.json(JOB_URL, {"name": {"en-US": "Forklift Operator", "pl-PL": "Operator wózka"}, "language": "pl-PL"})

    response = client.get("/acme/job-1")

    assert response.status_code == 200
    assert "Forklift Operator" in response.text
    assert 'name="sourceJobId" value="job-1"' in response.text


def test_job_page_without_descriptor_still_renders(client):
    response = client.get("/acme/job-404")

    assert response.status_code == 200
    assert "You are applying for" not in response.text


def test_lang_query_sets_cookie(client):
    response = client.get("/acme?lang=pl")

    assert response.status_code == 200
    assert "Aplikuj na to stanowisko" in response.text
    assert '<html lang="pl">' in response.text
    assert response.cookies.get("st_lang") == "pl"


def test_language_cookie_is_respected(client):
    client.cookies.set("st_lang", "pl")

    response = client.get("/acme")

    assert "Aplikuj na to stanowisko" in response.text
    assert "st_lang" not in response.headers.get("set-cookie", "")


def test_accept_language_fallback(client):
    response = client.get("/acme", headers={"Accept-Language": "pl-PL,pl;q=0.9,en;q=0.8"})

    assert "Aplikuj na to stanowisko" in response.text


def test_tenant_translation_overrides(client, upstream):
    upstream.json("https://cdn.test/tenants/acme/apply/i18n/en.json", {"form": {"title": "Join Acme"}})

    response = client.get("/acme")

    assert "Join Acme" in response.text
    assert "Submit application" in response.text


def test_tracking_fields_are_prefilled(client):
    response = client.get("/acme?utm_source=indeed", headers={"Referer": "https://indeed.com/job/1"})

    assert 'name="referrer" value="https://indeed.com/job/1"' in response.text
    assert "utm_source" in response.text


def test_thank_you_with_logo_and_background(client, upstream):
    upstream.image(LOGO_URL)
    upstream.image(BACKGROUND_URL)

    response = client.get("/acme/thank-you")

    assert response.status_code == 200
    assert "Thank you for applying!" in response.text
    assert f"background-image: url('{BACKGROUND_URL}')" in response.text
    assert f'src="{LOGO_URL}"' in response.text


def test_thank_you_falls_back_to_tenant_name(client):
    response = client.get("/acme/thank-you")

    assert response.status_code == 200
    assert '<span class="brand-name">Acme</span>' in response.text
    assert "background-image" not in response.text


def test_default_thank_you_page(client, upstream):
    response = client.get("/thank-you?lang=pl")

    assert response.status_code == 200
    assert "Dziękujemy za aplikację!" in response.text
    assert '<span class="brand-name">Default</span>' in response.text
    assert upstream.sent("HEAD", LOGO_URL) == []


def test_unsafe_tenant_is_not_found(client, upstream):
    response = client.get("/favicon.ico")

    assert response.status_code == 404
    assert upstream.requests == []
