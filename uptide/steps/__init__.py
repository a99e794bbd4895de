"""Registry of update steps in the order they run.

Steps are independent of one another; the order below only determines what
the user sees first.
"""

from uptide.engine.runner import Step
from uptide.steps import zsh

STEPS: tuple[Step, ...] = (
    Step("zr", "zr", zsh.run_zr),
    Step("antibody", "antibody", zsh.run_antibody),
    Step("antidote", "antidote", zsh.run_antidote),
    Step("antigen", "antigen", zsh.run_antigen),
    Step("zgenom", "zgenom", zsh.run_zgenom),
    Step("zplug", "zplug", zsh.run_zplug),
    Step("zinit", "zinit", zsh.run_zinit),
    Step("zi", "zi", zsh.run_zi),
    Step("zim", "zim", zsh.run_zim),
    Step(
        "oh_my_zsh",
        "oh-my-zsh",
        zsh.run_oh_my_zsh,
        accepted_codes=frozenset({zsh.OH_MY_ZSH_RESTART_CODE}),
    ),
)


def get_step(name: str) -> Step:
    """Look up a step by name.

    Raises:
        KeyError: If no step has that name
    """
    for step in STEPS:
        if step.name == name:
            return step
    raise KeyError(name)


__all__ = ["STEPS", "get_step"]
