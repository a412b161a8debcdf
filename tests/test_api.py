"""Tests for the Flask HTTP relay."""

import pytest

from logiflow.api import create_app
from logiflow.models import ProductionLine
from logiflow.persistence import OrderRepository
from logiflow.store import SchedulingStore


@pytest.fixture
def order_payload():
    """Fixture for an order as posted by the portal."""
    return {
        "customerId": "customer-7",
        "deliveryAddress": "1 North St",
        "priority": "high",
        "requiredProductionTime": 2,
        "items": [{"id": "item-1", "productId": "widget", "quantity": 3}],
    }


def place(client, payload):
    response = client.post('/api/orders', json=payload)
    assert response.status_code == 200
    return response.get_json()['id']


class TestOrderRelay:
    """Tests for POST/GET /api/orders."""

    def test_place_order(self, client, store, order_payload):
        """Test placing an order stores it and registers it for scheduling."""
        response = client.post('/api/orders', json=order_payload)
        data = response.get_json()

        assert response.status_code == 200
        assert data['success'] is True
        assert data['message'] == 'Order saved successfully!'
        assert store.find_order(data['id']).customer_id == "customer-7"

    def test_list_orders_newest_first(self, client, clock, order_payload):
        """Test listing returns stored orders newest first."""
        first = place(client, order_payload)
        clock.advance(minutes=5)
        second = place(client, order_payload)

        response = client.get('/api/orders')
        assert response.status_code == 200
        orders = response.get_json()
        assert [o['id'] for o in orders] == [second, first]
        assert orders[0]['customerId'] == "customer-7"
        assert 'createdAt' in orders[0]

    def test_invalid_order(self, client, order_payload):
        """Test a payload missing fields is rejected with 400."""
        del order_payload['deliveryAddress']
        response = client.post('/api/orders', json=order_payload)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_non_object_body(self, client):
        """Test a non-object body is rejected with 400."""
        response = client.post('/api/orders', data="not json", content_type='text/plain')
        assert response.status_code == 400

    def test_store_failure(self, relay_config, store, failing_documents, order_payload):
        """Test document store failures return 500 with the relay's messages."""
        client = create_app(relay_config, store=store, documents=failing_documents).test_client()

        response = client.post('/api/orders', json=order_payload)
        assert response.status_code == 500
        assert response.get_json() == {'success': False, 'message': 'Error saving order'}

        response = client.get('/api/orders')
        assert response.status_code == 500
        assert response.get_json()['message'] == 'Error fetching orders'


class TestSchedulingEndpoints:
    """Tests for the scheduling endpoints."""

    def test_full_flow(self, client, order_payload):
        """Test an order through production, delivery and analytics."""
        order_id = place(client, order_payload)

        response = client.post(f'/api/orders/{order_id}/production')
        assert response.status_code == 201
        production = response.get_json()
        assert production['priority'] == 3
        assert production['orderId'] == order_id

        assert client.post(f"/api/production/{production['id']}/start").get_json()['status'] == 'in-progress'
        assert client.post(f"/api/production/{production['id']}/complete").get_json()['status'] == 'completed'

        response = client.post(f'/api/orders/{order_id}/delivery')
        assert response.status_code == 201
        delivery = response.get_json()
        assert delivery['startTime'] == production['endTime']
        assert delivery['productionScheduleId'] == production['id']

        assert client.post(f"/api/deliveries/{delivery['id']}/start").status_code == 200
        completed = client.post(f"/api/deliveries/{delivery['id']}/complete").get_json()
        assert completed['status'] == 'completed'

        report = client.get('/api/analytics/efficiency').get_json()
        assert report['productionEfficiency'] == pytest.approx(0.85)
        assert report['completedDeliveries'] == 1

    def test_optimize_endpoints(self, client, order_payload):
        """Test optimize endpoints return the re-sequenced lists."""
        low = dict(order_payload, priority="low")
        low_id = place(client, low)
        high_id = place(client, order_payload)
        client.post(f'/api/orders/{low_id}/production')
        client.post(f'/api/orders/{high_id}/production')

        response = client.post('/api/production/optimize')
        assert response.status_code == 200
        assert [s['orderId'] for s in response.get_json()] == [high_id, low_id]

        client.post(f'/api/orders/{high_id}/delivery')
        response = client.post('/api/deliveries/optimize')
        assert response.status_code == 200
        assert len(response.get_json()) == 1

    def test_unknown_order(self, client):
        """Test scheduling an unknown order maps InvalidOrder to 400."""
        response = client.post('/api/orders/missing/production')
        data = response.get_json()
        assert response.status_code == 400
        assert data['success'] is False
        assert data['error'] == 'InvalidOrder'

    def test_no_capacity(self, relay_config, scheduling_config, clock, documents, order_payload):
        """Test a store without lines maps NoCapacity to 409."""
        store = SchedulingStore(scheduling_config, clock=clock)
        client = create_app(relay_config, store=store, documents=documents).test_client()
        order_id = place(client, order_payload)

        response = client.post(f'/api/orders/{order_id}/production')
        assert response.status_code == 409
        assert response.get_json()['error'] == 'NoCapacity'

    def test_regression_rejected(self, client, order_payload):
        """Test restarting completed production maps InvalidTransition to 400."""
        order_id = place(client, order_payload)
        production = client.post(f'/api/orders/{order_id}/production').get_json()
        client.post(f"/api/production/{production['id']}/complete")

        response = client.post(f"/api/production/{production['id']}/start")
        assert response.status_code == 400
        assert response.get_json()['error'] == 'InvalidTransition'

    def test_vehicle_exhausted(self, client, store, order_payload):
        """Test an exhausted fleet maps NoVehicleAvailable to 409."""
        store.add_production_line(ProductionLine(id="line-2"))
        first = place(client, order_payload)
        second = place(client, order_payload)
        client.post(f'/api/orders/{first}/production')
        client.post(f'/api/orders/{second}/production')
        assert client.post(f'/api/orders/{first}/delivery').status_code == 201

        response = client.post(f'/api/orders/{second}/delivery')
        assert response.status_code == 409
        assert response.get_json()['error'] == 'NoVehicleAvailable'

    def test_order_reloaded_from_document_store(self, client, store, documents, clock, order_payload):
        """Test orders stored before a restart are registered on first use."""
        order_id = OrderRepository(documents, clock=clock).place_order(order_payload)
        assert store.find_order(order_id) is None

        response = client.post(f'/api/orders/{order_id}/production')
        assert response.status_code == 201
        assert store.find_order(order_id) is not None
