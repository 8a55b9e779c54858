"""Reconciliation of the published applications of an old and a new farm."""

import logging
from collections.abc import Iterable
from typing import Optional

from apprecon.configuration.models import ActionSettings, ReconcilerConfig, default_join_step
from apprecon.core_engine.exceptions import ActionNotAvailable, FarmError
from apprecon.core_engine.join import JoinedRow
from apprecon.core_engine.loggers import get_logger, set_log_level
from apprecon.core_engine.metadata.steps import JoinStep
from apprecon.core_engine.records import MISSING, get_field
from apprecon.core_engine.type_hints import Action, ApplicationName, FieldName, MutableRecord
from apprecon.farms.base import BaseFarmClient
from apprecon.farms.service import get_farm_client
from apprecon.reconciliation.actions import derive_actions
from apprecon.reconciliation.models import ActionOutcome, ReconciledRow


def _sort_key(value: object) -> tuple[int, str]:
    """A case-insensitive sort key which places absent values last."""
    if value is MISSING or value is None:
        return (1, "")
    return (0, str(value).casefold())


class Reconciler:
    """Merges the applications of an old farm (left) and a new farm (right),
    and applies actions to them.

    The reconciler holds the rows from the latest `refresh`. It never changes
    them in place: after applying actions, call `refresh` again to see the
    effect.

    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        old_farm: BaseFarmClient,
        new_farm: BaseFarmClient,
        join_step: Optional[JoinStep] = None,
        *,
        sort_field: Optional[FieldName] = None,
        enabled_field: Optional[FieldName] = None,
        action_settings: Optional[ActionSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.old_farm = old_farm
        """The client for the farm being migrated from."""
        self.new_farm = new_farm
        """The client for the farm being migrated to."""
        self.join_step = (join_step or default_join_step()).check()
        """The join used to merge the applications of the two farms."""
        self.sort_field = sort_field or self.join_step.left_key
        """The field to sort merged rows by."""
        self.enabled_field = enabled_field
        """
        The field holding an application's enabled flag in both farms. If unset,
        each farm client's own `enabled_field` is used.

        """
        self.action_settings = action_settings or ActionSettings()
        """Options for actions taken against the farms."""
        self.logger = logger or get_logger(type(self).__name__)
        """The `logging.Logger` instance for the reconciler."""
        self.rows: list[ReconciledRow] = []
        """The rows from the latest refresh."""

    @classmethod
    def from_config(
        cls, config: ReconcilerConfig, logger: Optional[logging.Logger] = None
    ) -> "Reconciler":
        """Build a reconciler (and its farm clients) from configuration."""
        if config.log_level is not None:
            set_log_level(config.log_level)
        return cls(
            get_farm_client(config.old_farm),
            get_farm_client(config.new_farm),
            config.get_join_step(),
            sort_field=config.get_sort_field(),
            enabled_field=config.enabled_field,
            action_settings=config.actions,
            logger=logger,
        )

    def _row_name(self, joined: JoinedRow) -> Optional[ApplicationName]:
        """Get the application name for a joined row, from either farm."""
        for record, key in (
            (joined.left, self.join_step.left_key),
            (joined.right, self.join_step.right_key or self.join_step.left_key),
        ):
            value = get_field(record, key)
            if value is not MISSING and value is not None:
                return value
        return None

    def _sort_value(self, row: ReconciledRow) -> object:
        """Get the value a row is sorted by."""
        value = row.joined.get(self.sort_field, MISSING)
        if value is MISSING:
            value = row.name
        return value

    def refresh(self) -> list[ReconciledRow]:
        """Query both farms and rebuild the merged rows."""
        old_applications = self.old_farm.list_applications()
        new_applications = self.new_farm.list_applications()
        self.logger.info(
            "Retrieved %d applications from %r and %d from %r",
            len(old_applications),
            self.old_farm.name,
            len(new_applications),
            self.new_farm.name,
        )

        joined_rows = self.join_step.apply(old_applications, new_applications, logger=self.logger)
        rows = [
            ReconciledRow(
                name=self._row_name(joined),
                joined=joined,
                actions=derive_actions(
                    joined,
                    self.enabled_field or self.old_farm.enabled_field,
                    self.enabled_field or self.new_farm.enabled_field,
                ),
            )
            for joined in joined_rows
        ]
        rows.sort(key=lambda row: _sort_key(self._sort_value(row)))
        self.rows = rows

        n_both = sum(1 for row in rows if row.status == "both")
        self.logger.info(
            "Reconciled %d applications (%d in both farms, %d old only, %d new only)",
            len(rows),
            n_both,
            sum(1 for row in rows if row.status == "old_only"),
            sum(1 for row in rows if row.status == "new_only"),
        )
        return rows

    def _build_new_application(self, row: ReconciledRow) -> MutableRecord:
        """Build the record used to create an old farm application in the new farm."""
        source = row.joined.left or {}
        copy_fields = self.action_settings.copy_fields
        if copy_fields is None:
            record = dict(source)
        else:
            record = {field: source[field] for field in copy_fields if field in source}
        record[self.new_farm.name_field] = row.name
        record[self.new_farm.enabled_field] = self.action_settings.created_enabled
        return record

    def _perform(self, action: Action, row: ReconciledRow) -> str:
        """Issue a single action through the matching farm client."""
        if action == "create_new":
            self.new_farm.create_application(self._build_new_application(row))
            return f"Created {row.name!r} on {self.new_farm.name!r}"

        farm = self.old_farm if action.endswith("_old") else self.new_farm
        side = row.joined.left if farm is self.old_farm else row.joined.right
        key = farm.name_field
        application = get_field(side, key)
        if application is MISSING or application is None:
            application = row.name

        enable = action.startswith("enable")
        farm.set_application_enabled(application, enable)
        return f"{'Enabled' if enable else 'Disabled'} {application!r} on {farm.name!r}"

    def apply(
        self, action: Action, rows: Iterable[ReconciledRow], *, strict: bool = False
    ) -> list[ActionOutcome]:
        """Take an action for each of the selected rows.

        Rows which don't support the action are skipped (or, if `strict`,
        cause an `ActionNotAvailable` error before anything is changed). Farm
        errors are logged and reported in the outcome for the row, and don't
        stop the remaining rows from being processed.

        """
        rows = list(rows)
        if strict:
            for row in rows:
                if not row.supports(action):
                    raise ActionNotAvailable(action=action, application=row.name)

        outcomes: list[ActionOutcome] = []
        for row in rows:
            if not row.supports(action):
                message = str(ActionNotAvailable(action=action, application=row.name))
                self.logger.warning(message)
                outcomes.append(
                    ActionOutcome(
                        action=action,
                        application=row.name,
                        success=False,
                        skipped=True,
                        message=message,
                    )
                )
                continue

            try:
                message = self._perform(action, row)
            except FarmError as err:
                self.logger.exception("Failed to %s for %r", action, row.name)
                outcomes.append(
                    ActionOutcome(
                        action=action, application=row.name, success=False, message=str(err)
                    )
                )
            else:
                self.logger.info(message)
                outcomes.append(
                    ActionOutcome(action=action, application=row.name, success=True, message=message)
                )
        return outcomes
