"""BingeBase-haku ja katselulista: hakusivutus, debounce ja katselulistan synkronointi."""
