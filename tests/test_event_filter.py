from datetime import date

from app.services.event_filter import EventFilter, event_sort_key


def test_empty_values_mean_no_filter():
    event_filter = EventFilter.build(category="", search="")

    assert event_filter.category is None
    assert event_filter.search is None
    assert event_filter.where() == {}
    assert event_filter({"title": "Anything", "category": "food"})


def test_category_is_exact_and_case_sensitive():
    event_filter = EventFilter.build(category="music")

    assert event_filter.where() == {"category": "music"}
    assert event_filter({"category": "music"})
    assert not event_filter({"category": "Music"})


def test_search_matches_title_description_or_location():
    event_filter = EventFilter.build(search="HALL")

    assert event_filter({"title": "x", "description": "y", "location": "Town Hall"})
    assert event_filter({"title": "Hallway talk", "description": "", "location": ""})
    assert not event_filter({"title": "Jazz", "description": "Live", "location": "Park"})


def test_category_and_search_combine_with_and():
    event_filter = EventFilter.build(category="music", search="jazz")

    assert event_filter({"category": "music", "title": "Jazz Night"})
    assert not event_filter({"category": "sports", "title": "Jazz Cup"})
    assert not event_filter({"category": "music", "title": "Rock Night"})


def test_sort_key_orders_by_date_then_time():
    events = [
        {"date": "2030-06-02", "time": "10:00"},
        {"date": "2030-06-01", "time": "20:00"},
        {"date": "2030-06-01", "time": "09:00"},
    ]

    ordered = sorted(events, key=event_sort_key)

    assert ordered == [events[2], events[1], events[0]]


def test_list_events_filters(event_service, make_event):
    make_event(title="Jazz Night", category="music")
    make_event(title="Jazz Cup", category="sports", description="Football cup")

    music = event_service.list_events(category="music")
    jazz = event_service.list_events(search="jazz")

    assert [e.title for e in music] == ["Jazz Night"]
    assert {e.title for e in jazz} == {"Jazz Night", "Jazz Cup"}


def test_list_events_ordered_by_date(event_service, make_event):
    make_event(title="Later", date=date(2030, 9, 1))
    make_event(title="Sooner", date=date(2030, 3, 1))

    assert [e.title for e in event_service.list_events()] == ["Sooner", "Later"]
