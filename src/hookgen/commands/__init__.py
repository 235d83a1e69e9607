"""Built-in CLI sub-commands for hookgen.

* :mod:`~hookgen.commands.generate` -- write types, hooks or Markdown docs
  from an OpenAPI document.
* :mod:`~hookgen.commands.inspect` -- show how endpoints would be grouped
  and named without writing anything.

Both modules export a plain callback function that :mod:`hookgen.app`
registers directly on the root app.
"""
