from __future__ import annotations

from _infra import banner

from stepwise import Emitted, Finished, PausableComputation, computation


@computation
def gen_as_iterator():
    yield 1
    yield 2
    yield 3


@computation
def error_handling():
    try:
        x = yield 3
        print(f"x: {x}")  # never happens below
    except ValueError as err:
        print(f"Error: {err}")


def main() -> None:
    banner("01_basics: resume / throw_into by hand")

    it = gen_as_iterator()
    while True:
        match it.resume():
            case Emitted(value):
                print("emitted", value)
            case Finished(value):
                print("finished", value, it.state)
                break

    for value in gen_as_iterator():
        print("for-loop", value)

    handle: PausableComputation[None] = error_handling()
    print(handle.resume())
    print(handle.throw_into(ValueError("Whoopsie!")))


if __name__ == "__main__":
    main()
