import os, sys, pytest
# Ensure backend directory is on path so 'couponops' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import couponops
from couponops import create_app
from couponops.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import couponops.models.user  # noqa: F401
import couponops.models.merchant  # noqa: F401
import couponops.models.coupon  # noqa: F401
import couponops.models.deal  # noqa: F401
import couponops.models.banner  # noqa: F401
import couponops.models.conversion  # noqa: F401
import couponops.models.audit  # noqa: F401
import couponops.models.click  # noqa: F401
import couponops.models.extension_setting  # noqa: F401

TEST_CONFIG = {
    'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
    'TESTING': True,
    'JWT_SECRET_KEY': 'test-secret-key-with-enough-length-for-hs256',
}


@pytest.fixture()
def app_instance():
    # Fresh in-memory database per test
    app = create_app(dict(TEST_CONFIG))
    Base.metadata.create_all(couponops.db_engine)
    yield app
    couponops.SessionLocal.remove()
    Base.metadata.drop_all(couponops.db_engine)


@pytest.fixture()
def app_context(app_instance):
    with app_instance.app_context():
        yield app_instance


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
