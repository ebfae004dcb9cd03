"""Entry point wrapper for ``python -m chance_music``.

Forwards to :func:`chance_music.main` so ``python -m chance_music`` and the
installed ``chance-music`` console script behave identically.

Example
-------
::

    python -m chance_music --seed 1 --output song.mid
"""

from . import main

if __name__ == "__main__":
    main()
