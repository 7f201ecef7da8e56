"""
Root, echo and user-agent endpoints.

    /, /index.html   200, no headers, no body
    /echo/{text}     200, body = text as UTF-8
    /user-agent      200, body = the User-Agent header ("" if absent)

Echo and user-agent bodies are text/plain and gzip-compressed when the
client sends Accept-Encoding: gzip.
"""

from ..http.compression import encode_body
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


ECHO_PREFIX = "/echo/"


def text_response(request: HTTPRequest, text: str) -> HTTPResponse:
    response = ok().add_header("Content-Type", "text/plain")
    return encode_body(request, response, text.encode("utf-8"))


def root(request: HTTPRequest) -> HTTPResponse:
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    text = request.path_params.get("text", request.path[len(ECHO_PREFIX):])
    return text_response(request, text)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    return text_response(request, request.user_agent)
