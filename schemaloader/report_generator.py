"""Report generator for loaded entity registries."""

import json
from pathlib import Path
from typing import Optional
from datetime import datetime
from jinja2 import Template

from .config import OutputConfig
from .loader import LoadResult
from .models.entity import RelationshipKind


class ReportGenerator:
    """Generates Markdown and JSON output for a loader run."""

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize the report generator.

        Args:
            output_config: Output configuration
        """
        self.config = output_config or OutputConfig()

    def generate_schema_report(self, result: LoadResult, database_name: str = "") -> str:
        """Generate a Markdown report of the generated entities.

        Args:
            result: Loader run result
            database_name: Name shown in the report header

        Returns:
            Markdown report content
        """
        template = Template(SCHEMA_REPORT_TEMPLATE)

        entities = []
        for entity in result.registry.entities():
            columns_info = []
            for col in entity.columns:
                flags = []
                if col.name in entity.primary_key:
                    flags.append("PK")
                if not col.nullable:
                    flags.append("NOT NULL")

                flags_str = f" ({', '.join(flags)})" if flags else ""
                columns_info.append(f"- `{col.name}`: {col.data_type}{flags_str}")

            relations = []
            for rel in entity.relationships:
                arrow = "→" if rel.kind == RelationshipKind.BELONGS_TO else "⇉"
                relations.append(f"- {rel.kind.value} `{rel.name}` {arrow} `{rel.target_moniker}` ({rel.constraint_name})")

            entities.append({
                "moniker": entity.moniker,
                "table": entity.table.qualified_name,
                "primary_key": ", ".join(entity.primary_key) or "none",
                "capabilities": ", ".join(entity.capabilities),
                "columns": columns_info,
                "relationships": relations,
            })

        inference = result.inference
        content = template.render(
            database_name=database_name or "database",
            generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            table_count=len(result.tables_seen),
            entity_count=result.entity_count,
            filtered_count=len(result.filtered_tables),
            relationship_count=result.relationship_count,
            entities=entities,
            inference_ran=inference is not None,
            failures=inference.failures if inference else [],
            skipped=inference.skipped if inference else 0,
        )

        return content

    def generate_registry_json(self, result: LoadResult) -> str:
        """Dump the entity registry as JSON."""
        return json.dumps(result.registry.to_dict(), indent=2, ensure_ascii=False)

    def save_all_reports(self, result: LoadResult, database_name: str = "") -> dict[str, Path]:
        """Write every enabled report to the output directory.

        Returns:
            Mapping report kind -> written path
        """
        self.config.ensure_output_dir()
        saved = {}

        if self.config.generate_markdown:
            path = self.config.output_dir / self.config.report_name
            path.write_text(self.generate_schema_report(result, database_name), encoding="utf-8")
            saved["markdown"] = path

        if self.config.generate_json:
            path = self.config.output_dir / self.config.registry_json_name
            path.write_text(self.generate_registry_json(result), encoding="utf-8")
            saved["json"] = path

        return saved


SCHEMA_REPORT_TEMPLATE = """# Schema Report: {{ database_name }}

Generated at: {{ generated_at }}

## Summary

| Metric | Value |
|--------|-------|
| Tables in catalog | {{ table_count }} |
| Entities generated | {{ entity_count }} |
| Tables filtered out | {{ filtered_count }} |
| Relationship declarations | {{ relationship_count }} |

## Entities
{% for entity in entities %}
### {{ entity.moniker }}

- Table: `{{ entity.table }}`
- Primary key: {{ entity.primary_key }}
- Capabilities: {{ entity.capabilities }}

**Columns:**
{% for col in entity.columns %}
{{ col }}
{%- endfor %}
{% if entity.relationships %}
**Relationships:**
{% for rel in entity.relationships %}
{{ rel }}
{%- endfor %}
{% endif %}
{% endfor %}
{% if inference_ran %}
## Relationship Inference

- Unreachable constraints: {{ skipped }}
- Failed constraints: {{ failures | length }}
{% for failure in failures %}
- `{{ failure.constraint_name }}` on `{{ failure.table }}`: {{ failure.reason }}
{%- endfor %}
{% endif %}
"""
