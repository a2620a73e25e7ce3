from cosmos.use_statement import UseStatement


class ResolutionContextRenderer:
    """Turns a resolution context back into PHP source."""

    def render_context(self, context) -> str:
        rendered = ""
        if not context.primary_namespace.is_global:
            rendered = f"namespace {context.primary_namespace.runtime_string()};\n"

        if rendered and context.use_statements:
            rendered += "\n"

        for statement in context.use_statements:
            rendered += self.render_use_statement(statement) + ";\n"

        return rendered

    def render_use_statement(self, statement: UseStatement) -> str:
        return str(statement)
