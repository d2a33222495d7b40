"""Entry point wrapper for ``python -m buzzer_melody``.

Execution is forwarded to :func:`buzzer_melody.main` so ``python -m
buzzer_melody`` and the installed ``buzzer-melody`` console script behave
identically.

Example
-------
::

    python -m buzzer_melody --preset success --bpm 140 --gap 20
"""

from . import main

if __name__ == "__main__":
    main()
