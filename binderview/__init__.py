"""binderview: MTG collection catalog builder and viewer."""
