"""Subproject and environment configuration provider.

Merges values from configuration files chosen by the subproject (subdomain)
and the environment into the root configuration tree, overwriting or merging
existing values. The files are laid out under the config root like::

    config/
        env/
            common.yaml             # all subprojects, all environments
            admin/
                common.yaml         # admin subproject, all environments
                local.yaml          # admin subproject, "local" environment
                production.yaml
            cli/
                common.yaml
                ...

A tier file containing ``merge_config: true`` is merged instead of
overwriting. The environment name comes from ``APP_ENV``.
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from .loader.env import EnvironmentLoader
from .loader.file import FileLoader, TierDataProvider
from .loader.merger import ConfigurationMerger
from .models.schemas import SubconfigSettings, TierResult
from .resolver import CommandLineContext, ExecutionContext, SubprojectResolver
from .scenario import TierDescriptor, generate_scenario
from .store import ConfigStore

logger = logging.getLogger(__name__)


class SubconfigProvider:
    """Loads the subproject/environment tiers into a configuration store."""

    def __init__(
        self,
        store: ConfigStore,
        context: Optional[ExecutionContext] = None,
        settings: Optional[SubconfigSettings] = None,
        environment: Optional[str] = None,
        env_loader: Optional[EnvironmentLoader] = None,
        file_loader: Optional[FileLoader] = None,
    ):
        """Initialize the provider.

        Args:
            store: Configuration store the tiers are applied to
            context: Execution context (command line if None)
            settings: Loader settings (defaults if None)
            environment: Environment name (read from the process environment if None)
            env_loader: Loader used to read the environment name
            file_loader: Loader used for tier files
        """
        self.store = store
        self.settings = settings or SubconfigSettings()
        self.resolver = SubprojectResolver(
            context or CommandLineContext(),
            default=self.settings.default_subproject,
            cli_name=self.settings.cli_subproject,
        )
        self._environment = environment
        self._env_loader = env_loader or EnvironmentLoader()
        self.tiers = TierDataProvider(
            store,
            config_root=self.settings.config_root,
            file_extension=self.settings.file_extension,
            merge_key=self.settings.merge_key,
            file_loader=file_loader,
        )
        self.merger = ConfigurationMerger(store)

        self.subproject: Optional[str] = None
        self.loading_scenario: tuple[TierDescriptor, ...] = ()
        self.results: list[TierResult] = []
        self._registered = False

    @property
    def environment(self) -> str:
        """Name of the environment, e.g. ``production`` or ``local``."""
        if self._environment is None:
            self._environment = self._env_loader.current_environment(
                key=self.settings.environment_key,
                default=self.settings.default_environment,
            )
        return self._environment

    def register(self) -> None:
        """Resolve the subproject and load its configuration tiers, once."""
        if self._registered:
            return

        self.subproject = self.resolver.resolve()
        self.loading_scenario = self.generate_scenario()
        self.results = self.load_all(self.loading_scenario)
        self._registered = True

        applied = [r.path for r in self.results if r.applied]
        logger.info(
            f"Loaded configuration for subproject '{self.subproject}' "
            f"({self.environment}): {applied or 'no tiers found'}"
        )

    def generate_scenario(self) -> tuple[TierDescriptor, ...]:
        """Build the loading scenario for the resolved subproject."""
        return generate_scenario(
            self.subproject or self.resolver.resolve(),
            self.environment,
            base_key=self.settings.base_key,
            common_name=self.settings.common_name,
        )

    def load_all(self, scenario: Iterable[TierDescriptor]) -> list[TierResult]:
        """Apply each tier of the scenario in order.

        Each tier is fetched after the previous one was applied, so a tier
        found in the store may include values written by earlier tiers.
        """
        results = []

        for descriptor in scenario:
            descriptor = tuple(descriptor)
            payload = self.tiers.fetch(descriptor)
            if payload is None:
                results.append(TierResult(descriptor=descriptor, applied=False))
                continue

            keys = self.merger.apply(payload)
            logger.debug(
                f"Applied tier {'.'.join(descriptor)} from {payload.source.value} "
                f"({payload.mode.value}): {keys}"
            )
            results.append(
                TierResult(
                    descriptor=descriptor,
                    applied=True,
                    source=payload.source,
                    mode=payload.mode,
                    keys=keys,
                )
            )

        return results

    def tier_files(self) -> list[tuple[TierDescriptor, Path]]:
        """Return each tier of the scenario with the file that backs it."""
        scenario = self.loading_scenario or self.generate_scenario()
        return [(d, self.tiers.tier_file(d)) for d in scenario]


def init(
    store: Optional[ConfigStore] = None,
    base: Optional[Mapping[str, Any]] = None,
    config_root: Optional[Union[str, Path]] = None,
    context: Optional[ExecutionContext] = None,
    environment: Optional[str] = None,
    settings: Optional[SubconfigSettings] = None,
) -> ConfigStore:
    """Load subproject configuration, e.g. from a command-line script.

    Args:
        store: Store to load into (a new one holding ``base`` if None)
        base: Base configuration tree for a new store
        config_root: Overrides the settings' configuration root
        context: Execution context (command line if None)
        environment: Environment name (``APP_ENV`` if None)
        settings: Loader settings (read from ``SUBCONFIG_*`` variables if None)

    Returns:
        The store the configuration was loaded into
    """
    if settings is None:
        settings = SubconfigSettings.from_environment(config_root=config_root)
    elif config_root is not None:
        settings = settings.model_copy(update={"config_root": Path(config_root)})

    if store is None:
        store = ConfigStore(base)

    provider = SubconfigProvider(
        store, context=context, settings=settings, environment=environment
    )
    provider.register()
    return store
