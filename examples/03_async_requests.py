from __future__ import annotations

import json

from _infra import banner, demo_web, run

from kungfu import Error, Ok

from stepwise import (
    AsyncRequest,
    Driver,
    RequestCache,
    all_,
    caching_request_factory,
    drive,
    from_callback,
)


async def main() -> None:
    banner("03_async_requests: callbacks -> requests -> sequential body")

    web = demo_web()

    def request(url: str) -> AsyncRequest[str]:
        return from_callback(web.make_ajax_call, url)

    cached_request = caching_request_factory(RequestCache(), None, request)

    def lookup():
        data = json.loads((yield cached_request("http://whatever")))
        again = json.loads((yield cached_request("http://whatever")))
        assert data == again
        response = json.loads((yield request(f"http://whateverelse/{data['id']}")))
        return response["value"]

    traced = await Driver().run_w(lookup())
    print("value:", traced.result)
    print("trace:", [event.kind for event in traced.log])
    print("ajax calls:", web.calls)

    def search():
        terms = yield all_([request("http://url01"), request("http://url02"), request("http://url03")])
        results = yield request("http://url04?search=" + "+".join(terms))
        return json.loads(results)["value"]

    def broken():
        try:
            yield request("http://nowhere")
        except Exception as err:
            print("recovered:", err)
        yield request("http://still-nowhere")

    for body in (search, broken):
        match await drive(body):
            case Ok(value):
                print(f"{body.__name__}: ok {value!r}")
            case Error(err):
                print(f"{body.__name__}: error {err.cause!r}")


if __name__ == "__main__":
    run(main)
