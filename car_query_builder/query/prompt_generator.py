"""
Generate prompts for translating a car search request into Typesense parameters.
"""

from typing import List, Optional, Tuple

from car_query_builder.core.models import MAX_SORT_FIELDS, FieldCatalog, FieldDescriptor

DEFAULT_SORTING_HINTS = [
    'When a user says something like "good mileage", sort by highway_mpg or/and city_mpg.',
    'When a user says something like "powerful", sort by engine_hp.',
    'When a user says something like "latest" or "newest", sort by year.',
    'When a user says something like "cheap" or "affordable", sort by msrp.',
]

MORE_VALUES_NOTE = "There are more enum values for this field."

TABLE_HEADER = (
    "| Name | Data Type | Filter | Sort | Enum Values | Description |\n"
    "|------|-----------|--------|------|-------------|-------------|"
)


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _cell(text: str) -> str:
    """Keep a table cell on one line and free of column separators."""
    return " ".join(text.replace("|", "\\|").split())


def render_field_row(descriptor: FieldDescriptor) -> str:
    enums = ", ".join(descriptor.enum_values) if descriptor.enum_values else "N/A"
    description = descriptor.description or ""
    if descriptor.has_more_values:
        description = f"{description} {MORE_VALUES_NOTE}".strip()
    return (
        f"| {descriptor.name} | {descriptor.data_type} | {_yes_no(descriptor.filterable)} "
        f"| {_yes_no(descriptor.sortable)} | {_cell(enums)} | {_cell(description)} |"
    )


def render_field_table(catalog: FieldCatalog) -> str:
    """Render the catalog as a markdown table, one row per field in catalog order."""
    rows = [render_field_row(descriptor) for descriptor in catalog.fields]
    return "\n".join([TABLE_HEADER, *rows])


class PromptGenerator:
    """
    Generates the prompts for Typesense query extraction.

    The system prompt teaches the filter/sort grammar and lists the collection
    fields with their enum values; the user prompt is the raw request. Output is
    a pure function of the catalog and the request.
    """

    def __init__(
        self,
        catalog: FieldCatalog,
        subject: str = "cars",
        sorting_hints: Optional[List[str]] = None,
    ):
        """
        Initialize prompt generator.

        Args:
            catalog: Enriched field catalog of the collection
            subject: What the collection holds, used in the instructions
            sorting_hints: Domain hints mapping vague wording to sort fields
        """
        self.catalog = catalog
        self.subject = subject
        self.sorting_hints = DEFAULT_SORTING_HINTS if sorting_hints is None else sorting_hints

    def generate_system_prompt(self) -> str:
        """
        Generate the system prompt.

        Returns:
            Grammar instructions followed by the field table
        """
        hints = "\n".join(f"  - {hint}" for hint in self.sorting_hints)
        hints_section = f"\nSorting hints:\n{hints}\n" if hints else ""

        return f"""You are assisting a user in searching for {self.subject}. Convert their query into the appropriate Typesense query format based on the instructions below.

### Typesense Query Syntax ###

## Filtering (for the filter_by property) ##

Matching values: The syntax is {{fieldName}} followed by the match operator : and a string value or an array of string values separated by commas. Do not wrap the value in double quotes or single quotes. Examples:
 - model:prius
 - make:[BMW,Nissan] returns cars that are manufactured by BMW OR Nissan.

Numeric Filters: Use :[min..max] for ranges, or comparison operators like :>, :<, :>=, :<=, :=. Examples:
 - year:[2000..2020]
 - highway_mpg:>40
 - msrp:=30000

Multiple Conditions: Separate conditions with &&. Examples:
 - engine_hp:>300 && make:[BMW,Audi]
 - market_category:=Luxury && market_category:=Performance

OR Conditions Across Fields: Use || only for different fields. Examples:
 - vehicle_size:Large || vehicle_style:Wagon
 - (vehicle_size:Large || vehicle_style:Wagon) && year:>2010

If the same field is used for filtering multiple values in an || (OR) operation, you MUST use the multi-value syntax instead. For example:
`make:BMW || make:Honda || make:Ford`
must be written as:
`make:[BMW,Honda,Ford]`

Negation: Use :!= to exclude values. Examples:
 - make:!=Nissan
 - make:!=[Nissan,BMW]

If a string value contains parentheses, surround the value with backticks to escape it.
For example, if a field has the value "premium unleaded (required)", use it like this:
 - engine_fuel_type:`premium unleaded (required)`
 - engine_fuel_type:!=`premium unleaded (required)`

## Sorting (for the sort_by property) ##

You can sort by at most {MAX_SORT_FIELDS} fields at a time. The syntax is {{fieldName}}: followed by asc (ascending) or desc (descending). To sort by multiple fields, separate them with a comma. Examples:
 - msrp:desc
 - year:asc,city_mpg:desc
{hints_section}
## Fields ##

Only use fields marked "Yes" in the Filter column inside filter_by, and only fields marked "Yes" in the Sort column inside sort_by. When a field lists enum values, pick values from that list instead of inventing new ones.

{render_field_table(self.catalog)}

### Query (for the query property) ###
Include query only if both filter_by and sort_by are inadequate, for example a free-text term that is not one of the enum values.

### Output Instructions ###
Provide valid JSON with the correct filter and sorting format, and only include properties with non-null values. Do not add extra text or explanations. The user's request follows."""

    def generate_user_prompt(self, raw_query: str) -> str:
        return raw_query

    def build(self, raw_query: str) -> Tuple[str, str]:
        return self.generate_system_prompt(), self.generate_user_prompt(raw_query)


def build_prompt(catalog: FieldCatalog, raw_query: str) -> Tuple[str, str]:
    """
    Build the (system, user) prompt pair for a request.

    Args:
        catalog: Enriched field catalog
        raw_query: The user's natural-language request

    Returns:
        Tuple of system prompt and user prompt
    """
    return PromptGenerator(catalog).build(raw_query)
