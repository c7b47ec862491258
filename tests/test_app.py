import pytest

from ticket_app import app


def test_page_order_puts_known_pages_first():
    pages, default = app.page_order(["Zeta", "Setup / Connection", "Cards Detail", "Alpha"], connected=True)
    assert pages == ["Cards Detail", "Setup / Connection", "Alpha", "Zeta"]
    assert default == 0


def test_setup_preselected_until_connected():
    pages, default = app.page_order(["Resolution Time", "Setup / Connection", "Cards Detail"], connected=False)
    assert pages[default] == "Setup / Connection"
    _, default = app.page_order(["Resolution Time", "Cards Detail"], connected=False)
    assert default == 0


def test_register_page_rejects_a_second_owner(monkeypatch):
    monkeypatch.setattr(app, "PAGES", {})

    @app.register_page("Cards Detail")
    def cards():
        pass

    assert app.PAGES["Cards Detail"] is cards

    def other():
        pass

    with pytest.raises(ValueError, match="already registered"):
        app.register_page("Cards Detail")(other)
