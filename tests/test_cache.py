from unittest.mock import MagicMock, patch

from lenscraft.infrastructure.cache import (
    APPROVED_CLASSES_KEY,
    delete_cache_pattern,
    get_cache,
    invalidate_catalog,
    set_cache,
)


@patch('lenscraft.infrastructure.cache.get_redis')
def test_get_cache_hit(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = '[{"id": 1}]'
    mock_redis.return_value = mock_client

    assert get_cache(APPROVED_CLASSES_KEY) == [{"id": 1}]
    mock_client.get.assert_called_once_with(APPROVED_CLASSES_KEY)


@patch('lenscraft.infrastructure.cache.get_redis')
def test_get_cache_miss(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = None
    mock_redis.return_value = mock_client

    assert get_cache("classes:approved") is None


def test_get_cache_redis_down():
    """Redis being unreachable is a miss, not a failure"""
    assert get_cache("classes:approved") is None
    assert set_cache("classes:approved", []) is False
    assert delete_cache_pattern("classes:*") == 0


@patch('lenscraft.infrastructure.cache.get_redis')
def test_set_cache_uses_ttl(mock_redis):
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert set_cache("classes:popular:6", [{"id": 2}], ttl=30) is True
    mock_client.setex.assert_called_once_with("classes:popular:6", 30, '[{"id": 2}]')


@patch('lenscraft.infrastructure.cache.get_redis')
def test_invalidate_catalog(mock_redis):
    mock_client = MagicMock()
    mock_client.keys.return_value = ["classes:approved", "classes:popular:6"]
    mock_client.delete.return_value = 2
    mock_redis.return_value = mock_client

    assert invalidate_catalog() == 2
    mock_client.keys.assert_called_once_with("classes:*")


def test_approved_listing_served_from_cache(client):
    cached = [{
        "id": 7, "name": "Cached", "image": None,
        "instructor": {"name": "Ansel", "email": "instructor@example.com"},
        "seats": 5, "enrolled_count": 1, "available_seats": 4, "price": 20.0, "status": "approved",
    }]
    with patch('lenscraft.interfaces.http.routers.classes.get_cache', return_value=cached):
        response = client.get("/api/classes")
    assert response.status_code == 200
    assert response.json()[0]["name"] == "Cached"
    assert response.json()[0]["availableSeats"] == 4


def test_moderation_invalidates_catalog(client, as_user, make_class):
    as_user("admin@example.com", role="admin")
    klass = make_class(status="pending")
    with patch('lenscraft.interfaces.http.routers.classes.invalidate_catalog') as invalidate:
        client.patch(f"/api/classes/{klass.id}", json={"action": "approved"})
    invalidate.assert_called_once()


def test_metrics_endpoint(client):
    client.get("/api/classes")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    assert "http_requests_total" in response.text
    assert "enrollments_total" in response.text


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_cached_empty_listing_is_a_hit(client):
    """An empty catalog held in the cache does not go back to the database"""
    with patch('lenscraft.interfaces.http.routers.classes.get_cache', return_value=[]), \
         patch('lenscraft.interfaces.http.routers.classes.ViewComposer') as composer:
        response = client.get("/api/classes")
    assert response.status_code == 200
    assert response.json() == []
    composer.return_value.approved_classes.assert_not_called()


def test_submission_invalidates_catalog(client, as_user):
    as_user("instructor@example.com", role="instructor")
    with patch('lenscraft.interfaces.http.routers.classes.invalidate_catalog') as invalidate:
        response = client.post("/api/all-classes", json={"name": "Light", "seats": 5, "price": 10})
    assert response.status_code == 201
    invalidate.assert_called_once()
