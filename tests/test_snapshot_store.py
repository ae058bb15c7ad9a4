"""Unit tests for the snapshot stores."""
import json
from unittest.mock import Mock

import boto3
import pytest
import requests
import responses
from botocore.exceptions import ClientError
from moto import mock_aws

from processor.models import StrikeRecord
from storage.snapshot_store import S3SnapshotStore, StaticSnapshotStore
from strike_factories import make_active, make_strike

BUCKET = 'test-strike-data'
KEY = 'active-strikes.json'
PUBLIC_URL = f"https://{BUCKET}.s3.amazonaws.com/{KEY}"


@pytest.fixture
def s3_client():
    """Create a mock S3 bucket for testing."""
    with mock_aws():
        client = boto3.client('s3', region_name='us-east-1')
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def http_store():
    """Create a store whose S3 writes are never exercised."""
    return S3SnapshotStore(BUCKET, KEY, timeout=5, s3_client=Mock())


class TestS3SnapshotStoreLoad:
    """Test cases for reading the public snapshot."""

    @responses.activate
    def test_load_success(self, http_store, acme_strike, globex_strike):
        stored = {
            'Acme Hospital': acme_strike,
            'Globex Warehouse': globex_strike,
        }
        responses.add(responses.GET, PUBLIC_URL, json=stored, status=200)

        snapshot = http_store.load()

        assert list(snapshot.keys()) == ['Acme Hospital', 'Globex Warehouse']
        assert isinstance(snapshot['Acme Hospital'], StrikeRecord)
        assert snapshot['Acme Hospital'].to_dict() == acme_strike
        assert snapshot['Globex Warehouse'].employer == 'Globex Warehouse'

    @responses.activate
    def test_load_empty_object(self, http_store):
        responses.add(responses.GET, PUBLIC_URL, body='{}', status=200)

        assert http_store.load() == {}

    @pytest.mark.parametrize('status', [403, 404, 500])
    @responses.activate
    def test_load_http_error_is_absent(self, http_store, status):
        """Test that an unavailable object is treated as no snapshot."""
        responses.add(responses.GET, PUBLIC_URL, body='<Error/>', status=status)

        assert http_store.load() is None

    @pytest.mark.parametrize('body', ['', '   ', 'null'])
    @responses.activate
    def test_load_empty_content_is_absent(self, http_store, body):
        responses.add(responses.GET, PUBLIC_URL, body=body, status=200)

        assert http_store.load() is None

    @responses.activate
    def test_load_malformed_json_propagates(self, http_store):
        responses.add(responses.GET, PUBLIC_URL, body='{"Acme', status=200)

        with pytest.raises(json.JSONDecodeError):
            http_store.load()

    @responses.activate
    def test_load_non_object_snapshot_raises(self, http_store):
        responses.add(responses.GET, PUBLIC_URL, body='[]', status=200)

        with pytest.raises(ValueError, match="JSON object"):
            http_store.load()

    @responses.activate
    def test_load_connection_error_propagates(self, http_store):
        responses.add(
            responses.GET,
            PUBLIC_URL,
            body=requests.ConnectionError('connection refused')
        )

        with pytest.raises(requests.ConnectionError):
            http_store.load()


class TestS3SnapshotStoreSave:
    """Test cases for writing the snapshot to S3."""

    def test_save_writes_public_json(self, s3_client, acme_strike, globex_strike):
        store = S3SnapshotStore(BUCKET, KEY, s3_client=s3_client)
        active = make_active(acme_strike, globex_strike)

        assert store.save(active) is True

        obj = s3_client.get_object(Bucket=BUCKET, Key=KEY)
        assert obj['ContentType'] == 'application/json; charset=utf-8'
        assert json.loads(obj['Body'].read()) == {
            'Acme Hospital': acme_strike,
            'Globex Warehouse': globex_strike,
        }

        acl = s3_client.get_object_acl(Bucket=BUCKET, Key=KEY)
        assert any(
            grant['Grantee'].get('URI', '').endswith('/global/AllUsers') and
            grant['Permission'] == 'READ'
            for grant in acl['Grants']
        )

    def test_save_overwrites_previous_snapshot(self, s3_client, acme_strike):
        store = S3SnapshotStore(BUCKET, KEY, s3_client=s3_client)

        store.save(make_active(acme_strike, make_strike('Initech')))
        store.save(make_active(acme_strike))

        obj = s3_client.get_object(Bucket=BUCKET, Key=KEY)
        assert list(json.loads(obj['Body'].read()).keys()) == ['Acme Hospital']

    def test_save_is_idempotent(self, s3_client, acme_strike):
        store = S3SnapshotStore(BUCKET, KEY, s3_client=s3_client)
        active = make_active(acme_strike)

        store.save(active)
        first = s3_client.get_object(Bucket=BUCKET, Key=KEY)['Body'].read()
        store.save(active)
        second = s3_client.get_object(Bucket=BUCKET, Key=KEY)['Body'].read()

        assert first == second

    def test_save_keeps_non_ascii_text(self, s3_client):
        store = S3SnapshotStore(BUCKET, KEY, s3_client=s3_client)

        store.save(make_active(make_strike('Café Olé')))

        body = s3_client.get_object(Bucket=BUCKET, Key=KEY)['Body'].read()
        assert 'Café Olé'.encode('utf-8') in body

    def test_save_client_error_propagates(self, acme_strike):
        s3 = Mock()
        s3.put_object.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'Access Denied'}},
            'PutObject'
        )
        store = S3SnapshotStore(BUCKET, KEY, s3_client=s3)

        with pytest.raises(ClientError):
            store.save(make_active(acme_strike))


class TestStaticSnapshotStore:
    """Test cases for the canned snapshot store."""

    def test_load_parses_canned_snapshot(self, acme_strike):
        store = StaticSnapshotStore(json.dumps({'Acme Hospital': acme_strike}))

        snapshot = store.load()

        assert snapshot['Acme Hospital'].to_dict() == acme_strike

    def test_load_without_snapshot_is_absent(self):
        assert StaticSnapshotStore(None).load() is None

    def test_save_records_payload(self, acme_strike):
        store = StaticSnapshotStore('{}')

        assert store.save(make_active(acme_strike)) is True

        assert len(store.saved_payloads) == 1
        assert json.loads(store.saved_payloads[0]) == {'Acme Hospital': acme_strike}

    def test_roundtrip_preserves_snapshot(self, acme_strike, globex_strike):
        active = make_active(acme_strike, globex_strike)
        writer = StaticSnapshotStore(None)
        writer.save(active)

        reader = StaticSnapshotStore(writer.saved_payloads[0].decode('utf-8'))

        assert reader.load() == active


class TestStrictJsonSnapshot:
    """Test cases for literals that strict JSON rejects."""

    @pytest.mark.parametrize('constant', ['NaN', 'Infinity', '-Infinity'])
    def test_load_non_finite_constant_raises(self, constant):
        store = StaticSnapshotStore(
            f'{{"Acme Hospital": {{"Employer": "Acme Hospital", "Latitude": {constant}}}}}'
        )

        with pytest.raises(ValueError, match="Invalid JSON constant"):
            store.load()

    def test_serialize_refuses_nan(self):
        active = make_active(make_strike('Acme Hospital', Latitude=float('nan')))

        with pytest.raises(ValueError):
            StaticSnapshotStore.serialize(active)

    def test_save_with_nan_writes_nothing(self):
        store = StaticSnapshotStore(None)

        with pytest.raises(ValueError):
            store.save(make_active(make_strike('Acme Hospital', Latitude=float('inf'))))

        assert store.saved_payloads == []
