"""
End-to-end tests against a running server on a real TCP port.
"""

import gzip
import socket
import threading

import pytest

from minihttp import HTTPServer, ServerConfig


class TestEndpoints:

    def test_root(self, client):
        assert client.send(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_index_html(self, client):
        status, headers, body = client.request(b"GET /index.html HTTP/1.1\r\n\r\n")

        assert status == "HTTP/1.1 200 OK"
        assert headers == []
        assert body == b""

    def test_delete_root_is_200(self, client):
        status, _, _ = client.request(b"DELETE / HTTP/1.1\r\n\r\n")

        assert status == "HTTP/1.1 200 OK"

    def test_echo(self, client, find_header):
        status, headers, body = client.request(b"GET /echo/abc HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert status == "HTTP/1.1 200 OK"
        assert find_header(headers, "Content-Type") == "text/plain"
        assert find_header(headers, "Content-Length") == "3"
        assert body == b"abc"

    def test_echo_gzip(self, client, find_header):
        status, headers, body = client.request(
            b"GET /echo/abc HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n"
        )

        assert status == "HTTP/1.1 200 OK"
        assert find_header(headers, "Content-Encoding") == "gzip"
        assert find_header(headers, "Content-Length") == str(len(body))
        assert gzip.decompress(body) == b"abc"

    def test_echo_unsupported_encoding(self, client, find_header):
        _, headers, body = client.request(
            b"GET /echo/abc HTTP/1.1\r\nAccept-Encoding: invalid-encoding\r\n\r\n"
        )

        assert find_header(headers, "Content-Encoding") is None
        assert body == b"abc"

    def test_user_agent(self, client, find_header, sample_get_request):
        status, headers, body = client.request(sample_get_request)

        assert status == "HTTP/1.1 200 OK"
        assert find_header(headers, "Content-Length") == "15"
        assert body == b"test-client/1.0"

    def test_unknown_path(self, client):
        assert client.send(b"GET /nope HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_malformed_request_line(self, client):
        assert client.send(b"NONSENSE\r\n\r\n") == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_empty_connection_gets_nothing(self, server):
        with socket.create_connection(server.address, timeout=5.0) as sock:
            sock.shutdown(socket.SHUT_WR)
            assert sock.recv(4096) == b""


class TestFiles:

    def test_upload_then_download(self, client, files_dir, find_header, sample_post_request):
        assert client.send(sample_post_request) == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_dir / "a.txt").read_bytes() == b"hello"

        for _ in range(2):
            status, headers, body = client.request(b"GET /files/a.txt HTTP/1.1\r\n\r\n")

            assert status == "HTTP/1.1 200 OK"
            assert find_header(headers, "Content-Type") == "application/octet-stream"
            assert find_header(headers, "Content-Length") == "5"
            assert body == b"hello"

    def test_binary_upload(self, client, files_dir):
        payload = bytes(range(256)) * 400
        request = (
            b"POST /files/blob.bin HTTP/1.1\r\n"
            b"Content-Length: " + str(len(payload)).encode() + b"\r\n"
            b"\r\n" + payload
        )

        assert client.send(request) == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_dir / "blob.bin").read_bytes() == payload

    def test_missing_file(self, client):
        assert client.send(b"GET /files/nope.txt HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 Not Found\r\n\r\n"

    @pytest.mark.parametrize("method", [b"PUT", b"DELETE"])
    def test_other_methods(self, client, method):
        reply = client.send(method + b" /files/a.txt HTTP/1.1\r\n\r\n")

        assert reply == b"HTTP/1.1 405 Method Not Allowed\r\n\r\n"

    def test_traversal_refused(self, client, files_dir):
        (files_dir.parent / "secret.txt").write_bytes(b"secret")

        reply = client.send(b"GET /files/../secret.txt HTTP/1.1\r\n\r\n")

        assert reply == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_no_directory_is_500(self, client_without_directory):
        expected = b"HTTP/1.1 500 Internal Server Error\r\n\r\n"

        assert client_without_directory.send(b"GET /files/a.txt HTTP/1.1\r\n\r\n") == expected
        assert client_without_directory.send(
            b"POST /files/a.txt HTTP/1.1\r\nContent-Length: 1\r\n\r\nx"
        ) == expected


class TestLifecycle:

    def test_start_and_stop(self, files_dir):
        srv = HTTPServer(ServerConfig(port=0, directory=str(files_dir), log_level="WARNING"))
        srv.start()
        try:
            assert srv.is_running
            assert srv.address[1] != 0
        finally:
            srv.stop()

        assert not srv.is_running
        with pytest.raises(OSError):
            socket.create_connection(srv.address, timeout=1.0)


class TestConcurrency:

    def test_stalled_client_does_not_block_others(self, server, client):
        with socket.create_connection(server.address, timeout=5.0) as stalled:
            stalled.sendall(b"GET /echo/slow HTTP/1.1\r\n")   # No blank line yet

            _, _, body = client.request(b"GET /echo/fast HTTP/1.1\r\n\r\n")
            assert body == b"fast"

            stalled.sendall(b"\r\n")
            stalled.shutdown(socket.SHUT_WR)
            with stalled.makefile("rb") as reply:
                assert reply.read().endswith(b"\r\n\r\nslow")

    def test_parallel_clients(self, client):
        results = {}

        def fetch(i):
            _, _, body = client.request(f"GET /echo/{i} HTTP/1.1\r\n\r\n".encode())
            results[i] = body

        threads = [threading.Thread(target=fetch, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert results == {i: str(i).encode() for i in range(20)}
