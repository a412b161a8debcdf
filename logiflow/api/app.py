"""
LogiFlow HTTP relay.

Places and lists orders through the document store and drives the
scheduling store over JSON endpoints.
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ..config import RelayConfig, SchedulingConfig
from ..exceptions import (
    InvalidOrder,
    InvalidSchedule,
    InvalidTransition,
    NoCapacity,
    NoDriverAvailable,
    NoVehicleAvailable,
    SchedulingError,
    StoreUnavailable,
)
from ..models.order import Order
from ..persistence.document_store import DocumentStore, InMemoryDocumentStore, JsonFileDocumentStore
from ..persistence.order_repository import OrderRepository
from ..store import SchedulingStore

logger = logging.getLogger(__name__)

#: HTTP status per scheduling error type
ERROR_STATUS = {
    InvalidOrder: 400,
    InvalidSchedule: 400,
    InvalidTransition: 400,
    NoCapacity: 409,
    NoVehicleAvailable: 409,
    NoDriverAvailable: 409,
    StoreUnavailable: 503,
}


def status_for(error: SchedulingError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


def create_app(
    config: Optional[RelayConfig] = None,
    store: Optional[SchedulingStore] = None,
    documents: Optional[DocumentStore] = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Relay configuration (read from the environment when omitted)
        store: Scheduling store (built from SchedulingConfig.from_env() when omitted)
        documents: Document store (JSON files under storage_dir, else in-memory)
    """
    config = config or RelayConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if documents is None:
        if config.storage_dir is not None:
            documents = JsonFileDocumentStore(config.storage_dir)
        else:
            documents = InMemoryDocumentStore()

    if store is None:
        scheduling_config = SchedulingConfig.from_env()
        if config.seed_default_resources:
            store = SchedulingStore.with_default_resources(scheduling_config, documents=documents)
        else:
            store = SchedulingStore(scheduling_config, documents=documents)

    repository = OrderRepository(documents, clock=store.clock)

    app = Flask(__name__)
    app.config['SCHEDULING_STORE'] = store
    app.config['ORDER_REPOSITORY'] = repository

    # CORS for the portal frontend
    origins = config.allowed_origins
    CORS(app, origins=origins if origins == "*" else [o.strip() for o in origins.split(",")])

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(error: SchedulingError):
        status = status_for(error)
        if status >= 500:
            logger.error(f"{type(error).__name__}: {error}")
        else:
            logger.warning(f"{type(error).__name__}: {error}")
        return jsonify({
            'success': False,
            'error': type(error).__name__,
            'message': str(error),
        }), status

    def ensure_registered(order_id: str) -> Order:
        order = store.find_order(order_id)
        if order is None:
            # Placed before a restart: reload from the document store
            order = store.register_order(repository.get_order(order_id))
        return order

    # =========================================================================
    # Orders
    # =========================================================================

    @app.route('/api/orders', methods=['POST'])
    def place_order():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({'success': False, 'message': 'Request body must be a JSON object'}), 400

        try:
            order = repository.create_order(payload)
        except InvalidOrder as e:
            return jsonify({'success': False, 'message': str(e)}), 400
        except StoreUnavailable as e:
            logger.error(f"Error saving order: {e}")
            return jsonify({'success': False, 'message': 'Error saving order'}), 500

        store.register_order(order)
        return jsonify({'success': True, 'message': 'Order saved successfully!', 'id': order.id}), 200

    @app.route('/api/orders', methods=['GET'])
    def list_orders():
        try:
            orders = repository.list_orders()
        except StoreUnavailable as e:
            logger.error(f"Error fetching orders: {e}")
            return jsonify({'success': False, 'message': 'Error fetching orders'}), 500
        return jsonify(orders)

    # =========================================================================
    # Production
    # =========================================================================

    @app.route('/api/orders/<order_id>/production', methods=['POST'])
    def schedule_production(order_id):
        ensure_registered(order_id)
        schedule = store.schedule_production(order_id)
        return jsonify(schedule.to_document()), 201

    @app.route('/api/production/optimize', methods=['POST'])
    def optimize_production():
        schedules = store.optimize_production_schedule()
        return jsonify([s.to_document() for s in schedules])

    @app.route('/api/production/<schedule_id>/start', methods=['POST'])
    def start_production(schedule_id):
        return jsonify(store.start_production(schedule_id).to_document())

    @app.route('/api/production/<schedule_id>/complete', methods=['POST'])
    def complete_production(schedule_id):
        return jsonify(store.complete_production(schedule_id).to_document())

    # =========================================================================
    # Delivery
    # =========================================================================

    @app.route('/api/orders/<order_id>/delivery', methods=['POST'])
    def schedule_delivery(order_id):
        ensure_registered(order_id)
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        schedule = store.schedule_delivery(order_id, payload.get('productionScheduleId'))
        return jsonify(schedule.to_document()), 201

    @app.route('/api/deliveries/optimize', methods=['POST'])
    def optimize_deliveries():
        schedules = store.optimize_delivery_routes()
        return jsonify([s.to_document() for s in schedules])

    @app.route('/api/deliveries/<schedule_id>/start', methods=['POST'])
    def start_delivery(schedule_id):
        return jsonify(store.start_delivery(schedule_id).to_document())

    @app.route('/api/deliveries/<schedule_id>/complete', methods=['POST'])
    def complete_delivery(schedule_id):
        return jsonify(store.complete_delivery(schedule_id).to_document())

    # =========================================================================
    # Analytics
    # =========================================================================

    @app.route('/api/analytics/efficiency', methods=['GET'])
    def efficiency():
        return jsonify(store.efficiency_report().to_dict())

    return app
