import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from tonutils.liteclient.config import (
    GlobalConfig,
    LiteserverConfig,
    NoConnectionsError,
    ServerID,
    config_from_dict,
    get_config_from_url,
    int_to_ip4,
)

GOOD_RESPONSE = """{
    "liteservers": [{
        "ip": 1,
        "port": 2,
        "id": {
            "@type": "testtype",
            "key": "placeholder"
        }
    }]
}"""

BAD_RESPONSE = """{
    "liteservers": [{
        "ip: 1,
        "port": 2,
        "id": {
            "@type": "testtype",
            "key": "placeholder"
        }
    }]
}"""


@pytest.fixture
def serve():
    servers = []

    def start(body):
        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):
                payload = body.encode()
                self.send_response(200)
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, *args):
                pass

        server = HTTPServer(("127.0.0.1", 0), Handler)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_port}/"

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


def test_get_config_from_url_basic(serve):
    url = serve(GOOD_RESPONSE)
    got = get_config_from_url(url, timeout=5)
    want = GlobalConfig(
        liteservers=[
            LiteserverConfig(ip=1, port=2, id=ServerID(type="testtype", key="placeholder"))
        ]
    )
    assert got == want


def test_get_config_from_url_bad_json(serve):
    url = serve(BAD_RESPONSE)
    with pytest.raises(ValueError):
        get_config_from_url(url, timeout=5)


def test_config_from_dict_nested_fields():
    cfg = config_from_dict(
        {
            "@type": "config.global",
            "dht": {
                "k": 6,
                "a": 3,
                "static_nodes": {
                    "nodes": [
                        {
                            "id": {"key": "placeholder"},
                            "addr_list": {"addrs": [{"ip": 5, "port": 7}], "expire_at": 0},
                            "version": -1,
                        }
                    ]
                },
            },
            "validator": {"zero_state": {"workchain": -1, "shard": -9223372036854775808}},
            "unknown": True,
        }
    )
    assert cfg.type == "config.global"
    assert cfg.dht.k == 6
    assert cfg.dht.static_nodes.nodes[0].addr_list.addrs[0].port == 7
    assert cfg.dht.static_nodes.nodes[0].version == -1
    assert cfg.validator.zero_state.shard == -9223372036854775808
    assert cfg.liteservers == []


def test_config_from_dict_rejects_wrong_types():
    with pytest.raises(ValueError):
        config_from_dict({"liteservers": [{"ip": "1"}]})
    with pytest.raises(ValueError):
        config_from_dict([])


def test_int_to_ip4():
    assert int_to_ip4(0x7F000001) == "127.0.0.1"
    assert int_to_ip4(-2018135749) == "135.181.140.59"
    assert int_to_ip4(0) == "0.0.0.0"


def test_no_connections_error_message():
    assert str(NoConnectionsError()) == "no connections established"