import listing
import views
from listing import DashboardState
from questions import RATING_KEYS, humanize_key, split_camel


def test_key_label_humanization():
    assert humanize_key("brandAlignment") == "Brand Alignment"
    assert humanize_key("quality") == "Quality"
    assert split_camel("brandAlignment") == "brand Alignment"


def test_card_and_table_show_same_fields(make_record, rate):
    r = make_record("Alice", "alice@example.com", responses=rate("2", trust="5"), suggestions="")
    card = views.card_view([r])[0]
    table = views.table_view([r])

    assert [x["label"] for x in card["ratings"]] == [humanize_key(k) for k in RATING_KEYS]
    assert table["columns"][4:-1] == [humanize_key(k) for k in RATING_KEYS]
    cells = table["rows"][0]["cells"]
    assert cells[:4] == [card["name"], card["email"], card["domain"], card["submitted_at"]]
    assert cells[4:-1] == [x["value"] for x in card["ratings"]]
    assert cells[-1] == "-"
    assert card["submitted_at"].endswith(" IST")


def test_detail_view_is_untruncated(make_record):
    long_text = "word " * 500
    detail = views.detail_view(make_record(suggestions=long_text))
    assert detail["suggestions"] == long_text
    assert detail["created_at"]


def test_next_focus_wraps():
    assert views.next_focus(0, 3) == 1
    assert views.next_focus(2, 3) == 0
    assert views.next_focus(0, 3, backwards=True) == 2
    assert views.next_focus(1, 3, backwards=True) == 0
    assert views.next_focus(0, 0) == -1


def test_overlay_escape_closes_and_tab_cycles(make_record, fake_store):
    records = [make_record()]
    state = listing.select(listing.load(DashboardState(), fake_store(records)), records[0].id)

    tabbed = views.handle_overlay_key(state, "Tab", focus=1, focusable=2)
    assert tabbed.focus == 0
    assert tabbed.state.selected is records[0]

    back = views.handle_overlay_key(state, "Tab", focus=0, focusable=2, shift=True)
    assert back.focus == 1

    closed = views.handle_overlay_key(state, "Escape")
    assert closed.state.selected is None


def test_render_survey_has_every_question():
    page = views.render_survey()
    for key in RATING_KEYS:
        assert f'name="{key}"' in page
    assert "Client Survey" in page
    assert "#22c55e" in page


def test_render_dashboard_modes(make_record, fake_store):
    records = [make_record("Alice <b>", "alice@example.com")]
    state = listing.load(DashboardState(), fake_store(records))

    cards = views.render_dashboard(state)
    assert "Alice &lt;b&gt;" in cards
    assert "<table>" not in cards

    table = views.render_dashboard(listing.set_view(state, "table"))
    assert "<table>" in table
    assert "Brand Alignment" in table


def test_render_dashboard_detail_and_error(make_record, fake_store):
    records = [make_record("Alice", "alice@example.com")]
    state = listing.select(listing.load(DashboardState(), fake_store(records)), records[0].id)
    assert 'id="detail"' in views.render_dashboard(state)

    failed = listing.load(DashboardState(), fake_store(fail_reads=True))
    page = views.render_dashboard(failed)
    assert 'role="alert"' in page
    assert listing.LOAD_FAILED_MESSAGE in page


def test_render_dashboard_empty_states(make_record, fake_store):
    empty = listing.load(DashboardState(), fake_store([]))
    assert "No responses found." in views.render_dashboard(empty)

    state = listing.load(DashboardState(), fake_store([make_record("Alice", "alice@example.com")]))
    assert "No responses found." not in views.render_dashboard(state)
    missed = views.render_dashboard(listing.set_search(state, "zzz"))
    assert "No responses found." in missed
    assert "Alice" not in missed

    failed = views.render_dashboard(listing.load(DashboardState(), fake_store(fail_reads=True)))
    assert 'role="alert"' in failed
    assert "No responses found." not in failed


def test_render_dashboard_numbered_pager(make_record, fake_store):
    records = [make_record(f"User {i}", f"user{i}@example.com") for i in range(5)]
    state = listing.load(DashboardState(page_size=2), fake_store(records))
    page = views.render_dashboard(listing.go_to_page(state, 2))
    assert ">1</a>" in page
    assert ">3</a>" in page
    assert '<strong aria-current="page">2</strong>' in page
    assert "Page 2 of 3" in page
    assert "Previous</a>" in page and "Next</a>" in page
