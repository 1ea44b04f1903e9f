from typing import Annotated

from pydantic import StringConstraints

# Texto obligatorio: se recortan espacios y no puede quedar vacío
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
