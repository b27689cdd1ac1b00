from __future__ import annotations

from _infra import banner

from stepwise import PausableComputation, delegate


def receiver():
    try:
        yield 2
    except ValueError as err:
        print("receiver caught:", err)
    yield
    raise LookupError("12345")


def quarterback():
    yield 1
    try:
        yield delegate(receiver())
    except LookupError as err:
        print("quarterback caught:", err)


def catcher():
    yield 2
    yield 3
    return "im catcher"


def pitcher():
    yield 1
    v = yield delegate(catcher())
    print("v:", v)
    yield 4


def main() -> None:
    banner("02_delegation: return values and errors across delegate()")

    it = PausableComputation(pitcher())
    for _ in range(5):
        print(it.resume())

    print("all at once:", list(PausableComputation(pitcher())))

    it = PausableComputation(quarterback())
    print(it.resume())
    print(it.resume())
    print(it.throw_into(ValueError("Pass to receiver")))
    print(it.resume())


if __name__ == "__main__":
    main()
