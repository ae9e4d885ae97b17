"""
Partner contract requests.
"""
import logging

from docstore.backends.base import SERVER_TIMESTAMP

from .orders import InvalidStatus, STATUSES

logger = logging.getLogger(__name__)

CONTRACTS = 'contracts'
REQUIRED_FIELDS = ('name', 'firstname', 'email', 'phone', 'reason')


class MissingFields(ValueError):

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"missing fields: {', '.join(self.fields)}")


def submit_contract(store, data):
    cleaned = {name: str(data.get(name) or '').strip() for name in REQUIRED_FIELDS}
    missing = [name for name, value in cleaned.items() if not value]
    if missing:
        raise MissingFields(missing)
    contract_id = store.add(CONTRACTS, {
        **cleaned,
        'created_at': SERVER_TIMESTAMP,
        'status': 'pending',
    })
    logger.info("Contract request %s from %s", contract_id, cleaned['email'])
    return contract_id


def list_contracts(store):
    return store.list(CONTRACTS, order_by='created_at', descending=True)


def set_contract_status(store, contract_id, status):
    if status not in STATUSES:
        raise InvalidStatus(status)
    store.update(CONTRACTS, contract_id, {'status': status})


def delete_contract(store, contract_id):
    store.delete(CONTRACTS, contract_id)
