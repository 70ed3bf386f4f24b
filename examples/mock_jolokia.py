#!/usr/bin/env python3
"""
Mock Jolokia agent for trying the exporter locally.

Serves a handful of Infinispan cache statistics resources whose counters
grow on every read.

    python examples/mock_jolokia.py --port 8778
    infinispan-exporter collect --jolokia-url http://127.0.0.1:8778/jolokia
"""

import argparse
import json
import random
from http.server import BaseHTTPRequestHandler, HTTPServer

from infinispan_exporter.errors import ManagementError
from infinispan_exporter.management import ObjectName, StaticManagementClient

CACHES = [
    ('"default(dist_sync)"', "web"),
    ('"sso(repl_sync)"', "web"),
    ("local-query", "hibernate"),
]


def build_namespace() -> StaticManagementClient:
    namespace = StaticManagementClient()
    for name, manager in CACHES:
        namespace.register(
            f"org.wildfly.clustering.infinispan:component=Statistics,"
            f"name={name},manager={manager},type=Cache",
            {"hitRatio": 0.0, "hits": 0, "misses": 0, "numberOfEntries": 0, "evictions": 0},
        )
    return namespace


class MockJolokiaHandler(BaseHTTPRequestHandler):
    """Handler for mock Jolokia requests."""

    namespace = build_namespace()

    def log_message(self, format, *args):
        """Log messages to stdout."""
        print(f"[{self.log_date_time_string()}] {format % args}")

    def do_POST(self):
        """Handle POST requests."""
        length = int(self.headers.get("Content-Length", 0))
        try:
            request = json.loads(self.rfile.read(length) or b"{}")
        except ValueError:
            self._send_json_response({"status": 400, "error": "Invalid JSON"})
            return

        try:
            if request.get("type") == "version":
                value = {"agent": "mock", "protocol": "7.2"}
            elif request.get("type") == "search":
                pattern = ObjectName.parse(request["mbean"])
                value = sorted(str(name) for name in self.namespace.query_names(pattern))
            elif request.get("type") == "read":
                name = ObjectName.parse(request["mbean"])
                self._advance(name)
                value = self.namespace.get_attribute(name, request["attribute"])
            else:
                self._send_json_response({"status": 400, "error": "Unsupported request"})
                return
        except ValueError as e:
            self._send_json_response(
                {
                    "status": 400,
                    "error_type": "javax.management.MalformedObjectNameException",
                    "error": str(e),
                }
            )
            return
        except ManagementError as e:
            self._send_json_response(
                {
                    "status": 404,
                    "error_type": "javax.management.InstanceNotFoundException",
                    "error": e.message,
                }
            )
            return

        self._send_json_response({"request": request, "value": value, "status": 200})

    def _advance(self, name: ObjectName) -> None:
        """Simulate cache traffic between reads."""
        stats = {
            attribute: self.namespace.get_attribute(name, attribute)
            for attribute in ("hits", "misses", "numberOfEntries", "evictions")
        }
        stats["hits"] += random.randint(0, 20)
        stats["misses"] += random.randint(0, 3)
        stats["numberOfEntries"] = max(0, stats["numberOfEntries"] + random.randint(-2, 5))
        stats["evictions"] += random.randint(0, 1)
        total = stats["hits"] + stats["misses"]
        stats["hitRatio"] = stats["hits"] / total if total else 0.0
        self.namespace.register(name, stats)

    def _send_json_response(self, data, status_code=200):
        """Send JSON response."""
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())


def main():
    """Run mock Jolokia agent."""
    parser = argparse.ArgumentParser(description="Mock Jolokia agent")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8778, help="Port to bind to")
    args = parser.parse_args()

    server = HTTPServer((args.host, args.port), MockJolokiaHandler)

    print(f"Mock Jolokia agent running on http://{args.host}:{args.port}/jolokia")
    print("Press Ctrl+C to stop")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped")
        server.shutdown()


if __name__ == "__main__":
    main()
