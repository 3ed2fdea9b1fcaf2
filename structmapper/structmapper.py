import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from structmapper import logging as structmapper_logging
from structmapper import thirdparty, utils
from structmapper.c_parser import CParser, StructInfo
from structmapper.emitter import GeneratedUnit, MappingEmitter
from structmapper.manifest import is_manifest, load_manifest
from structmapper.mapping import (MappingRecord, TypeIndex, extract,
                                  plan_pairs, resolve)

logger = structmapper_logging.get_logger(__name__)


@dataclass
class GenerateResult:
    records: list[MappingRecord]
    units: list[GeneratedUnit]
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    output_dir: Optional[str] = None


class StructMapper:
    def __init__(
        self,
        config_file=None,
        config=None,
        output_dir=None,
        language=None,
        extra_args=None,
        dry_run=False,
        configure_logging=True,
    ):
        self.config_file = config_file
        self.config = config if config is not None else utils.try_load_config(self.config_file)
        if configure_logging and not structmapper_logging.is_configured():
            structmapper_logging.configure_logging(self.config)

        scan_cfg = self.config.get("scan", {})
        output_cfg = self.config.get("output", {})
        if language is not None:
            scan_cfg = {**scan_cfg, "language": language}
            self.config = {**self.config, "scan": scan_cfg}
        self.language = scan_cfg.get("language", "c")
        self.extra_args = list(scan_cfg.get("clang_args", [])) + list(extra_args or [])
        self.output_dir = os.path.abspath(output_dir or output_cfg.get("dir", "generated"))
        self.dry_run = dry_run
        self.match_target_renames = self.config.get("planning", {}).get("match_target_renames", True)
        self.file_suffix = self.config.get("generation", {}).get("file_suffix", ".g.h")
        self.clang_format = output_cfg.get("clang_format", False)
        self.warn_empty_pairs = output_cfg.get("warn_empty_pairs", True)

        logger.debug("Language: %s", self.language)
        logger.debug("Extra clang args: %s", self.extra_args)
        logger.debug("Output directory: %s", self.output_dir)
        logger.debug("Dry run: %s", self.dry_run)

        missing_requirements = thirdparty.check_all_requirements(self.config)
        if missing_requirements:
            raise OSError(f"Missing requirements: {', '.join(missing_requirements)}")

    def load_declarations(self, inputs: Iterable[str]) -> list[StructInfo]:
        scan_cfg = self.config.get("scan", {})
        std_key = "cxx_std" if self.language == "c++" else "c_std"
        declarations: list[StructInfo] = []
        for path in inputs:
            if is_manifest(path):
                declarations.extend(load_manifest(path))
                continue
            parser = CParser(
                path,
                extra_args=self.extra_args,
                language=self.language,
                std=scan_cfg.get(std_key),
                include_system_paths=scan_cfg.get("include_system_paths", True),
                omit_error=scan_cfg.get("omit_errors", False),
            )
            declarations.extend(parser.get_structs())
        return declarations

    def build_index(self, declarations: Iterable[StructInfo]) -> TypeIndex:
        return extract(declarations)

    def build_records(self, index: TypeIndex) -> list[MappingRecord]:
        pairs = resolve(index.annotated)
        return plan_pairs(index, pairs, match_target_renames=self.match_target_renames)

    def _report(self, records: Sequence[MappingRecord]) -> None:
        for record in records:
            plans = [record.forward] if record.reverse is None else [record.forward, record.reverse]
            for plan in plans:
                if plan.unmatched:
                    logger.debug("%s -> %s: unmatched members: %s",
                                 plan.source, plan.target, ", ".join(plan.unmatched))
                if self.warn_empty_pairs and not plan.assignments and not record.pair.is_self_pair:
                    logger.warning("%s -> %s: no fields in common, generated functions copy nothing",
                                   plan.source, plan.target, extra={"pair": record.pair.key})

    def render(self, index: TypeIndex, records: Sequence[MappingRecord]) -> tuple[list[GeneratedUnit], list[str]]:
        emitter = MappingEmitter.from_config(index, self.config)
        units: list[GeneratedUnit] = []
        skipped: list[str] = []
        used_names: set[str] = set()
        for record in records:
            if not emitter.should_emit(record.pair):
                logger.info("Skipping self mapping %s", record.pair.key)
                skipped.append(record.pair.key)
                continue
            name = emitter.unit_name(record.pair)
            if name in used_names:
                qualified = emitter.qualified_unit_name(record.pair)
                logger.warning("Unit name %s is already taken; writing %s as %s",
                               name, record.pair.key, qualified)
                name = qualified
            counter = 2
            base_name = name
            while name in used_names:
                name = f"{base_name}{counter}"
                counter += 1
            used_names.add(name)
            includes = [self._include_path(header) for header in emitter.headers_for(record.pair)]
            units.append(emitter.emit(record, includes=includes, unit_name=name))
        return units, skipped

    def _include_path(self, header: str) -> str:
        return os.path.relpath(os.path.abspath(header), self.output_dir)

    def write(self, units: Sequence[GeneratedUnit]) -> list[str]:
        written = []
        for unit in units:
            path = os.path.join(self.output_dir, f"{unit.name}{self.file_suffix}")
            utils.save_code(path, unit.text, clang_format=self.clang_format)
            logger.info("Generated %s", path)
            written.append(path)
        return written

    def run(self, inputs: Sequence[str]) -> GenerateResult:
        if not inputs:
            raise ValueError("At least one input file is required")
        declarations = self.load_declarations(inputs)
        index = self.build_index(declarations)
        records = self.build_records(index)
        logger.info("Resolved %d mapping pairs from %d types", len(records), len(index))
        self._report(records)
        units, skipped = self.render(index, records)
        written = [] if self.dry_run else self.write(units)
        return GenerateResult(
            records=records,
            units=units,
            written=written,
            skipped=skipped,
            output_dir=self.output_dir,
        )
