"""HTTP interface helpers shared by the domain routers."""
